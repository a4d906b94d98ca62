"""
Secret reads: single secret, secret map and filtered read-all.

Every read goes through read_secret so that validation, version decoding and
property extraction behave the same for direct reads, batch fetches and the
probe read of a push.
"""

import json
import logging
import re
from typing import Dict, List, Optional, Tuple

from okms_secrets.exceptions import (
    NoSecretError, NoSecretsFoundError, NoSecretsMatchedError, SecretValidationError
)
from okms_secrets.okms.base_client import OkmsClient
from .models import FindReference, MetadataPolicy, RemoteReference
from .paths import get_secrets_list
from .properties import canonical_json, get_property

logger = logging.getLogger(__name__)

MAX_SECRET_VERSION = 2 ** 32 - 1
_VERSION_PATTERN = re.compile(r'^[+-]?[0-9]+$')


def decode_secret_version(version: Optional[str]) -> Optional[int]:
    """Parse a version string into an unsigned 32-bit version number.

    Returns:
        The version, or None when no version is requested

    Raises:
        SecretValidationError: If the version is not an integer or does not fit
    """
    if not version:
        return None
    if not _VERSION_PATTERN.match(version):
        raise SecretValidationError(f'invalid secret version "{version}"')
    value = int(version)
    if value < 0 or value > MAX_SECRET_VERSION:
        raise SecretValidationError("overflow occurred while decoding secret version")
    return value


def read_secret(client: OkmsClient, ref: RemoteReference) -> Tuple[bytes, Optional[int]]:
    """Read one secret and extract the requested property.

    Args:
        client: Store client
        ref: Remote reference (key, optional property, version and metadata policy)

    Returns:
        Tuple of (secret data, current version of the secret)

    Raises:
        SecretValidationError: If the reference is malformed (no remote call is made)
        NoSecretError: If the secret does not exist
        PropertyNotFoundError: If the property does not exist in the secret
        RemoteStoreError: For any other store failure
    """
    if not ref.key:
        raise SecretValidationError("spec.data.remoteRef.key cannot be empty")
    if ref.metadata_policy == MetadataPolicy.FETCH:
        raise SecretValidationError("fetch metadata policy not supported", secret_name=ref.key)
    version = decode_secret_version(ref.version)

    record = client.read(ref.key, version=version, include_value=True)

    if not ref.property:
        data = canonical_json(record.value)
    else:
        data = get_property(record.value, ref.property, secret_name=ref.key).encode('utf-8')
    return data, record.current_version


def _value_to_bytes(value) -> bytes:
    if isinstance(value, str):
        return value.encode('utf-8')
    if value is None:
        return b''
    return canonical_json(value)


def read_secret_map(client: OkmsClient, ref: RemoteReference) -> Dict[str, bytes]:
    """Read one secret (or one of its properties) as a key -> bytes map.

    String values are returned as their raw text, every other value as
    canonical JSON.
    """
    data, _ = read_secret(client, ref)
    if not data:
        return {}

    try:
        raw_map = json.loads(data)
    except ValueError as e:
        raise SecretValidationError(f"secret '{ref.key}' is not a JSON object: {e}", secret_name=ref.key) from e
    if raw_map is None:
        return {}
    if not isinstance(raw_map, dict):
        raise SecretValidationError(f"secret '{ref.key}' is not a JSON object", secret_name=ref.key)

    return {key: _value_to_bytes(value) for key, value in raw_map.items()}


def compile_name_filter(find: FindReference) -> Optional[re.Pattern]:
    """Compile the name regexp of a find request, if any."""
    if find.name is None:
        return None
    try:
        return re.compile(find.name.regexp)
    except re.error as e:
        raise SecretValidationError(f"failed to parse regexp: {e}") from e


def filter_and_fetch(client: OkmsClient, secrets: List[str], regex: Optional[re.Pattern]) -> Dict[str, bytes]:
    """Fetch every secret whose path matches `regex` (all of them when None).

    A secret deleted between listing and fetch is skipped; any other error
    aborts the whole batch.
    """
    results: Dict[str, bytes] = {}
    for secret in secrets:
        if regex is not None and not regex.search(secret):
            continue
        try:
            data, _ = read_secret(client, RemoteReference(key=secret))
        except NoSecretError:
            logger.debug(f"Secret '{secret}' disappeared before it could be fetched, skipping")
            continue
        results[secret] = data

    if not results:
        raise NoSecretsMatchedError()
    return results


def read_all_secrets(client: OkmsClient, find: FindReference) -> Dict[str, bytes]:
    """Read every secret under `find.path` whose path matches `find.name.regexp`.

    Raises:
        NoSecretsFoundError: If nothing is stored under the path
        NoSecretsMatchedError: If secrets exist but none matched or survived the fetch
        SecretValidationError: If the regexp does not compile
    """
    secrets = get_secrets_list(client, find.path)
    if not secrets:
        raise NoSecretsFoundError()

    regex = compile_name_filter(find)
    results = filter_and_fetch(client, secrets, regex)
    logger.debug(f"Fetched {len(results)} of {len(secrets)} secrets under '{find.path or ''}'")
    return results
