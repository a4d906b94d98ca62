"""
Push reconciliation of local secret material into the secret manager.

A push reads the remote secret first, builds the value to write from the
local key/value pairs, and only writes when the canonical serializations
differ. Updates carry the version read by the probe as a CAS precondition
when the store requires it.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional, Union

from okms_secrets.exceptions import NoSecretError, SecretValidationError
from okms_secrets.okms.base_client import OkmsClient
from .models import PushDescriptor, RemoteReference
from .properties import canonical_json
from .reader import read_secret

logger = logging.getLogger(__name__)

LocalSecret = Mapping[str, Union[bytes, str]]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_local_value(raw: Union[bytes, str]) -> Any:
    """Return the parsed JSON structure of a local value, or its text if it is not JSON."""
    if isinstance(raw, str):
        raw = raw.encode('utf-8')
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        return raw.decode('utf-8', errors='replace')


def build_secret_to_push(secret: LocalSecret, descriptor: PushDescriptor) -> Dict[str, Any]:
    """Build the remote value from the local secret and the push descriptor."""
    if not descriptor.secret_key:
        value = {key: parse_local_value(raw) for key, raw in secret.items()}
    else:
        # A missing key is pushed as an empty string
        value = {descriptor.secret_key: parse_local_value(secret.get(descriptor.secret_key, b''))}

    if descriptor.property:
        return {descriptor.property: value}
    return value


def compare_secrets_data(secret_to_push: Dict[str, Any], remote_secret: bytes) -> bool:
    """Tell whether the candidate serializes to exactly the remote bytes.

    An empty remote value never compares equal.
    """
    if not remote_secret:
        return False
    return canonical_json(secret_to_push) == remote_secret


def push_secret(client: OkmsClient, secret: Optional[LocalSecret], descriptor: PushDescriptor,
                cas: bool = False) -> bool:
    """Reconcile a local secret into the store.

    Args:
        client: Store client
        secret: Local key/value pairs to push
        descriptor: Where and how to push them
        cas: Whether the store requires compare-and-swap on updates

    Returns:
        True if a write was issued, False if the remote value was already up to date

    Raises:
        SecretValidationError: If the secret is missing or empty, or the remote key is empty
        RemoteStoreError: If the probe read or the write fails
    """
    if secret is None:
        raise SecretValidationError("nil secret")
    if len(secret) == 0:
        raise SecretValidationError("cannot push empty secret")

    remote_key = descriptor.remote_key
    try:
        remote_secret, current_version = read_secret(client, RemoteReference(key=remote_key))
        secret_exists = True
    except NoSecretError:
        remote_secret, current_version = b'', None
        secret_exists = False

    secret_to_push = build_secret_to_push(secret, descriptor)

    if compare_secrets_data(secret_to_push, remote_secret):
        logger.debug(f"Secret '{remote_key}' is up to date, nothing to push")
        return False

    if not cas:
        current_version = None

    if not secret_exists:
        logger.debug(f"Creating secret '{remote_key}'")
        client.create(remote_key, secret_to_push)
    else:
        logger.debug(f"Updating secret '{remote_key}' (cas: {current_version})")
        client.update(remote_key, secret_to_push, expected_version=current_version)
    return True


def delete_secret(client: OkmsClient, remote_key: str) -> None:
    """Delete the secret at `remote_key`; store errors are returned unchanged."""
    if not remote_key:
        raise SecretValidationError("spec.data.remoteRef.key cannot be empty")
    client.delete(remote_key)


def secret_exists(client: OkmsClient, remote_key: str) -> bool:
    """Tell whether a secret exists at `remote_key` without fetching its value."""
    if not remote_key:
        raise SecretValidationError("spec.data.remoteRef.key cannot be empty")
    try:
        client.read(remote_key, include_value=False)
    except NoSecretError:
        return False
    return True
