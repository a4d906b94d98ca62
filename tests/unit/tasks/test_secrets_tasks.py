"""
Tests for the secrets invoke tasks, run against an in-memory store.
"""

import json
from unittest import mock

import pytest
from invoke import Context

from okms_secrets.exceptions import RemoteStoreError
from okms_secrets.okms.in_memory_client import InMemoryOkmsClient
from okms_secrets.secrets.client import OkmsSecretsClient
from okms_secrets.tasks import namespace
from okms_secrets.tasks import secrets as secrets_tasks


@pytest.fixture
def store():
    return InMemoryOkmsClient({
        'app/db': {'user': 'admin', 'password': 's3cr3t', 'port': 5432},
        'app/cache': {'url': 'redis://cache'},
    })


@pytest.fixture
def ctx(store):
    with mock.patch.object(
        secrets_tasks, '_create_client',
        side_effect=lambda: OkmsSecretsClient(store, provider_name='in-memory')
    ):
        yield Context()


def _output(capsys):
    return json.loads(capsys.readouterr().out)


def test_namespace_exposes_secrets_tasks():
    secrets_collection = namespace.collections['secrets']
    assert sorted(secrets_collection.task_names) == [
        'delete', 'exists', 'find', 'get', 'get-map', 'push', 'validate'
    ]


def test_get(ctx, capsys):
    secrets_tasks.get(ctx, 'app/db', property='user')
    output = _output(capsys)
    assert output['meta'] == {'success': True, 'provider': 'in-memory', 'operation': 'get'}
    assert output['key'] == 'app/db'
    assert output['data'] == 'admin'


def test_get_map(ctx, capsys):
    secrets_tasks.get_map(ctx, 'app/db')
    assert _output(capsys)['data'] == {'user': 'admin', 'password': 's3cr3t', 'port': '5432'}


def test_find(ctx, capsys):
    secrets_tasks.find(ctx, path='app', regexp='cache$')
    assert _output(capsys)['data'] == {'app/cache': '{"url":"redis://cache"}'}


def test_exists(ctx, capsys):
    secrets_tasks.exists(ctx, 'app/nope')
    assert _output(capsys)['data'] is False


def test_push(ctx, store, capsys):
    secrets_tasks.push(ctx, 'app/new', value=['user=admin', 'note=a=b'], data='{"port": 5432}')
    assert _output(capsys)['data'] is True
    assert store.read('app/new').value == {'user': 'admin', 'note': 'a=b', 'port': 5432}


def test_push_rejects_malformed_value(ctx):
    with pytest.raises(SystemExit) as excinfo:
        secrets_tasks.push(ctx, 'app/new', value=['no-equals-sign'])
    assert excinfo.value.code == 1


def test_delete_with_yes(ctx, store, capsys):
    secrets_tasks.delete(ctx, 'app/cache', yes=True)
    assert _output(capsys)['meta']['success'] is True
    assert store.list('app') == ['db']


def test_delete_cancelled(ctx, store):
    with mock.patch('builtins.input', return_value='no'):
        with pytest.raises(SystemExit):
            secrets_tasks.delete(ctx, 'app/cache')
    assert store.list('app') == ['cache', 'db']


def test_validate(ctx, capsys):
    secrets_tasks.validate(ctx)
    assert _output(capsys)['data'] == 'Ready'


def test_failure_prints_error_and_guidance(ctx, capsys):
    with pytest.raises(SystemExit) as excinfo:
        secrets_tasks.get(ctx, 'app/missing')
    assert excinfo.value.code == 1

    captured = capsys.readouterr()
    output = json.loads(captured.out)
    assert output['meta']['success'] is False
    assert output['meta']['error']['code'] == 'NoSecretError'
    assert "Secret 'app/missing' does not exist" in captured.err


def test_store_error(ctx, store, capsys):
    store.inject_error('probe', '', RemoteStoreError('connection refused'))
    with pytest.raises(SystemExit):
        secrets_tasks.validate(ctx)
    output = json.loads(capsys.readouterr().out)
    assert output['meta']['error'] == {'code': 'RemoteStoreError', 'message': 'connection refused'}


def test_client_creation_failure(capsys, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    (tmp_path / 'app.yaml').write_text('secrets:\n  provider: vault\n')
    with pytest.raises(SystemExit):
        secrets_tasks.validate(Context())
    output = json.loads(capsys.readouterr().out)
    assert output['meta']['error']['code'] == 'StoreValidationError'
    assert 'provider' not in output['meta']
