"""
Pytest configuration for secrets tests.

Provides an in-memory store seeded with the fake secrets and a matching
certificate/key pair for mTLS tests.
"""

import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from okms_secrets.okms.in_memory_client import InMemoryOkmsClient
from okms_secrets.secrets.client import OkmsSecretsClient
from .base import FAKE_SECRETS


@pytest.fixture
def fake_store():
    """In-memory store seeded with the fake secrets."""
    return InMemoryOkmsClient(FAKE_SECRETS)


@pytest.fixture
def secrets_client(fake_store):
    client = OkmsSecretsClient(fake_store, provider_name='in-memory')
    yield client
    client.close()


def _generate_key_pair():
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, 'okms-secrets-test')])
    now = datetime.datetime.now(datetime.timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(minutes=5))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    cert_pem = certificate.public_bytes(serialization.Encoding.PEM).decode('utf-8')
    key_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption()
    ).decode('utf-8')
    return cert_pem, key_pem


@pytest.fixture(scope='session')
def client_certificate():
    """Self-signed (cert_pem, key_pem) pair."""
    return _generate_key_pair()


@pytest.fixture(scope='session')
def other_client_certificate():
    """A second pair, for mismatched certificate/key tests."""
    return _generate_key_pair()
