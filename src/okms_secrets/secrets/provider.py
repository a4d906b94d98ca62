"""
Secrets providers.

A provider validates a raw store configuration and builds clients for it.
Providers are registered explicitly with a ProviderRegistry by the host
application at startup.
"""

import logging
from typing import Any, Dict, Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from pydantic import ValidationError

from okms_secrets.exceptions import StoreValidationError
from okms_secrets.okms.in_memory_client import InMemoryOkmsClient
from okms_secrets.okms.rest_client import OkmsRestClient
from .client import OkmsSecretsClient
from .credentials import env_credential_resolver
from .interface import CredentialResolver, SecretsProvider
from .models import (
    MtlsAuth, OkmsStoreConfig, StoreCapabilities, TokenAuth, describe_validation_error
)

logger = logging.getLogger(__name__)

EMPTY_TOKEN_SECRET_REF = "okms store auth.token.tokenSecretRef cannot be empty"
EMPTY_KEY_SECRET_REF = "okms store auth.mtls.keySecretRef cannot be empty"
EMPTY_CERT_SECRET_REF = "okms store auth.mtls.certSecretRef cannot be empty"


def load_client_certificate(cert_pem: str, key_pem: str) -> None:
    """Check that a PEM certificate and private key form a key pair.

    Raises:
        StoreValidationError: If either cannot be parsed or they do not match
    """
    try:
        certificate = x509.load_pem_x509_certificate(cert_pem.encode('utf-8'))
        private_key = serialization.load_pem_private_key(key_pem.encode('utf-8'), password=None)
    except (ValueError, TypeError) as e:
        raise StoreValidationError(f"failed to load client certificate: {e}") from e

    public_format = (serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo)
    if certificate.public_key().public_bytes(*public_format) != private_key.public_key().public_bytes(*public_format):
        raise StoreValidationError("failed to load client certificate: private key does not match public key")


class OkmsProvider(SecretsProvider):
    """Provider for OKMS secret managers reached over HTTPS."""

    name = "okms"

    def __init__(self, credential_resolver: Optional[CredentialResolver] = None):
        """Initialize the provider.

        Args:
            credential_resolver: Resolves credential selectors; defaults to the
                environment resolver
        """
        self.credential_resolver = credential_resolver or env_credential_resolver

    @property
    def capabilities(self) -> StoreCapabilities:
        return StoreCapabilities.READ_WRITE

    def validate_store(self, store: Optional[Dict[str, Any]]) -> OkmsStoreConfig:
        if store is None:
            raise StoreValidationError("store is nil")
        if isinstance(store, OkmsStoreConfig):
            return store
        if not isinstance(store, dict):
            raise StoreValidationError(f"store configuration must be a mapping, got {type(store).__name__}")
        try:
            return OkmsStoreConfig.model_validate(store)
        except ValidationError as e:
            raise StoreValidationError(describe_validation_error(e)) from e

    def new_client(self, store: Optional[Dict[str, Any]],
                   credential_resolver: Optional[CredentialResolver] = None) -> OkmsSecretsClient:
        config = self.validate_store(store)
        resolver = credential_resolver or self.credential_resolver

        rest_client = OkmsRestClient(config.server, str(config.okms_id), timeout=config.timeout)
        try:
            if isinstance(config.auth, TokenAuth):
                self._configure_token(rest_client, config.auth, resolver)
            else:
                self._configure_mtls(rest_client, config.auth, resolver)
        except Exception:
            rest_client.cleanup()
            raise

        logger.debug(f"OKMS client configured for {config.server} (domain: {config.okms_id}, "
                     f"auth: {config.auth.method}, cas: {config.cas_required})")
        return OkmsSecretsClient(rest_client, cas=config.cas_required, provider_name=self.name)

    def _configure_token(self, rest_client: OkmsRestClient, auth: TokenAuth,
                         resolver: CredentialResolver) -> None:
        if auth.token_secret_ref is None:
            raise StoreValidationError(EMPTY_TOKEN_SECRET_REF)
        token = resolver(auth.token_secret_ref)
        if not token:
            raise StoreValidationError(EMPTY_TOKEN_SECRET_REF)
        rest_client.use_token(token)

    def _configure_mtls(self, rest_client: OkmsRestClient, auth: MtlsAuth,
                        resolver: CredentialResolver) -> None:
        if auth.key_secret_ref is None:
            raise StoreValidationError(EMPTY_KEY_SECRET_REF)
        client_key = resolver(auth.key_secret_ref)
        if not client_key:
            raise StoreValidationError(EMPTY_KEY_SECRET_REF)

        if auth.cert_secret_ref is None:
            raise StoreValidationError(EMPTY_CERT_SECRET_REF)
        client_cert = resolver(auth.cert_secret_ref)
        if not client_cert:
            raise StoreValidationError(EMPTY_CERT_SECRET_REF)

        load_client_certificate(client_cert, client_key)
        rest_client.use_client_certificate(client_cert, client_key)


class InMemoryProvider(SecretsProvider):
    """Provider backed by a process-local in-memory store.

    Every client built by one provider instance shares the same store.
    """

    name = "in-memory"

    def __init__(self, store: Optional[InMemoryOkmsClient] = None):
        self.store = store or InMemoryOkmsClient()

    @property
    def capabilities(self) -> StoreCapabilities:
        return StoreCapabilities.READ_WRITE

    def validate_store(self, store: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if store is None:
            return {}
        if not isinstance(store, dict):
            raise StoreValidationError(f"store configuration must be a mapping, got {type(store).__name__}")
        cas_required = store.get('cas_required', store.get('casRequired', False))
        if not isinstance(cas_required, bool):
            raise StoreValidationError(f"cas_required must be a boolean, got {cas_required!r}")
        return {'cas_required': cas_required}

    def new_client(self, store: Optional[Dict[str, Any]],
                   credential_resolver: Optional[CredentialResolver] = None) -> OkmsSecretsClient:
        config = self.validate_store(store)
        return OkmsSecretsClient(self.store, cas=config.get('cas_required', False), provider_name=self.name)
