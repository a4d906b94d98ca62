"""
OKMS secrets client.

Binds the read, discovery and push algorithms to one store client and its CAS
setting.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from okms_secrets.exceptions import SecretValidationError
from okms_secrets.okms.base_client import OkmsClient
from .interface import SecretsClient
from .models import (
    FindReference, PushDescriptor, RemoteReference, ValidationResult, describe_validation_error
)
from .push import delete_secret, push_secret, secret_exists
from .reader import read_all_secrets, read_secret, read_secret_map

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=BaseModel)


def _as_model(value: Union[ModelT, Dict[str, Any]], model: Type[ModelT]) -> ModelT:
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise SecretValidationError(describe_validation_error(e)) from e


class OkmsSecretsClient(SecretsClient):
    """Secrets client over an OKMS secret manager."""

    def __init__(self, okms_client: OkmsClient, cas: bool = False, provider_name: str = "okms"):
        """Initialize the client.

        Args:
            okms_client: Store client used for every remote call
            cas: Whether updates must carry the version read before them
            provider_name: Name of the provider that built this client
        """
        self._okms_client = okms_client
        self._cas = cas
        self._provider_name = provider_name

    @property
    def provider_type(self) -> str:
        """Return the provider type."""
        return self._provider_name

    @property
    def cas(self) -> bool:
        """Return whether updates are compare-and-swap."""
        return self._cas

    def get_secret(self, ref: Union[RemoteReference, Dict[str, Any]]) -> bytes:
        ref = _as_model(ref, RemoteReference)
        data, _ = read_secret(self._okms_client, ref)
        return data

    def get_secret_map(self, ref: Union[RemoteReference, Dict[str, Any]]) -> Dict[str, bytes]:
        ref = _as_model(ref, RemoteReference)
        return read_secret_map(self._okms_client, ref)

    def get_all_secrets(self, find: Union[FindReference, Dict[str, Any]]) -> Dict[str, bytes]:
        find = _as_model(find, FindReference)
        return read_all_secrets(self._okms_client, find)

    def push_secret(self, secret: Optional[Mapping[str, Union[bytes, str]]],
                    descriptor: Union[PushDescriptor, Dict[str, Any]]) -> bool:
        descriptor = _as_model(descriptor, PushDescriptor)
        return push_secret(self._okms_client, secret, descriptor, cas=self._cas)

    def delete_secret(self, remote_key: str) -> None:
        delete_secret(self._okms_client, remote_key)

    def secret_exists(self, remote_key: str) -> bool:
        return secret_exists(self._okms_client, remote_key)

    def validate(self) -> ValidationResult:
        self._okms_client.probe_connectivity()
        logger.debug(f"{self._provider_name} store is reachable")
        return ValidationResult.READY

    def close(self) -> None:
        self._okms_client.cleanup()
