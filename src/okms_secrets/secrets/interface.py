"""
Abstract interfaces of the secrets connector.

Defines the contract a secrets client offers to the control plane and the
contract a provider offers to the registry.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .models import (
    FindReference, PushDescriptor, RemoteReference, SecretKeySelector,
    StoreCapabilities, ValidationResult
)

# Resolves a credential selector into the credential's value (token or PEM text)
CredentialResolver = Callable[[SecretKeySelector], str]


class SecretsClient(ABC):
    """Abstract base class for secrets clients."""

    @abstractmethod
    def get_secret(self, ref: Union[RemoteReference, Dict[str, Any]]) -> bytes:
        """Get one secret, or one of its properties.

        Args:
            ref: Remote reference (key, optional property, version and metadata policy)

        Returns:
            The whole secret as canonical JSON, or the property's text

        Raises:
            SecretValidationError: If the reference is malformed
            NoSecretError: If the secret does not exist
            PropertyNotFoundError: If the property does not exist in the secret
        """
        pass

    @abstractmethod
    def get_secret_map(self, ref: Union[RemoteReference, Dict[str, Any]]) -> Dict[str, bytes]:
        """Get one secret, or one of its object properties, as a key -> value map."""
        pass

    @abstractmethod
    def get_all_secrets(self, find: Union[FindReference, Dict[str, Any]]) -> Dict[str, bytes]:
        """Get every secret under a path whose path matches an optional regexp.

        Raises:
            NoSecretsFoundError: If nothing is stored under the path
            NoSecretsMatchedError: If nothing matched the regexp
        """
        pass

    @abstractmethod
    def push_secret(self, secret: Optional[Mapping[str, Union[bytes, str]]],
                    descriptor: Union[PushDescriptor, Dict[str, Any]]) -> bool:
        """Push local secret material into the store.

        Returns:
            True if a write was issued, False if the store was already up to date
        """
        pass

    @abstractmethod
    def delete_secret(self, remote_key: str) -> None:
        """Delete a secret from the store."""
        pass

    @abstractmethod
    def secret_exists(self, remote_key: str) -> bool:
        """Check if a secret exists in the store."""
        pass

    @abstractmethod
    def validate(self) -> ValidationResult:
        """Check that the store is reachable with the configured credentials."""
        pass

    def close(self) -> None:
        """Release the client's resources."""
        pass

    @property
    @abstractmethod
    def provider_type(self) -> str:
        """Return the name of the provider that built this client (e.g., 'okms', 'in-memory')."""
        pass


class SecretsProvider(ABC):
    """Abstract base class for providers registered with a ProviderRegistry."""

    @property
    @abstractmethod
    def capabilities(self) -> StoreCapabilities:
        """Return what clients of this provider can do."""
        pass

    @abstractmethod
    def validate_store(self, store: Optional[Dict[str, Any]]) -> Any:
        """Validate a raw store configuration.

        Returns:
            The validated configuration

        Raises:
            StoreValidationError: If the configuration cannot be used
        """
        pass

    @abstractmethod
    def new_client(self, store: Optional[Dict[str, Any]],
                   credential_resolver: Optional[CredentialResolver] = None) -> SecretsClient:
        """Validate the store configuration and build a client for it."""
        pass
