"""
Secrets connector for OKMS secret managers.

Provides reads, filtered discovery and idempotent pushes against an OKMS
secret manager, with an in-memory store for local development.
"""

from .models import (
    FindName,
    FindReference,
    MetadataPolicy,
    MtlsAuth,
    OkmsStoreConfig,
    PushDescriptor,
    RemoteReference,
    SecretKeySelector,
    StoreCapabilities,
    TokenAuth,
    ValidationResult,
)
from .interface import CredentialResolver, SecretsClient, SecretsProvider
from .client import OkmsSecretsClient
from .credentials import env_credential_resolver
from .provider import InMemoryProvider, OkmsProvider
from .factory import ProviderRegistry, create_secrets_client, register_builtin_providers

__all__ = [
    # Models
    'FindName',
    'FindReference',
    'MetadataPolicy',
    'MtlsAuth',
    'OkmsStoreConfig',
    'PushDescriptor',
    'RemoteReference',
    'SecretKeySelector',
    'StoreCapabilities',
    'TokenAuth',
    'ValidationResult',

    # Interface
    'CredentialResolver',
    'SecretsClient',
    'SecretsProvider',

    # Implementations
    'OkmsSecretsClient',
    'OkmsProvider',
    'InMemoryProvider',
    'env_credential_resolver',

    # Registry and factory
    'ProviderRegistry',
    'create_secrets_client',
    'register_builtin_providers',
]
