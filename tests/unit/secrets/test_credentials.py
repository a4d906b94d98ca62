import pytest

from okms_secrets.exceptions import StoreValidationError
from okms_secrets.secrets.credentials import env_credential_resolver, selector_env_var
from okms_secrets.secrets.models import SecretKeySelector


@pytest.mark.parametrize('name, key, expected', [
    ('okms-credentials', 'token', 'OKMS_CREDENTIALS_TOKEN'),
    ('okms-mtls', 'tls.crt', 'OKMS_MTLS_TLS_CRT'),
    ('plain', 'KEY', 'PLAIN_KEY'),
])
def test_selector_env_var(name, key, expected):
    assert selector_env_var(SecretKeySelector(name=name, key=key)) == expected


def test_resolves_from_environment(monkeypatch):
    monkeypatch.setenv('OKMS_MTLS_TLS_KEY', 'PEM')
    assert env_credential_resolver(SecretKeySelector(name='okms-mtls', key='tls.key')) == 'PEM'


def test_empty_variable_is_missing(monkeypatch):
    monkeypatch.setenv('OKMS_MTLS_TLS_KEY', '')
    with pytest.raises(StoreValidationError) as excinfo:
        env_credential_resolver(SecretKeySelector(name='okms-mtls', key='tls.key'))
    assert "credential 'okms-mtls/tls.key' is required but not set" in str(excinfo.value)
