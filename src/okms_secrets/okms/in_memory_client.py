"""
In-memory OKMS client.

Used by the in-memory provider for local development and by the unit test
suites for fast, isolated testing. Behaves like the remote secret manager:
versions start at 1, CAS mismatches are rejected and listing returns only the
next path segment of each entry.
"""
import copy
import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from okms_secrets.exceptions import NoSecretError, RemoteStoreError
from .base_client import OkmsClient
from .response import SecretRecord

logger = logging.getLogger(__name__)

# OKMS error codes reproduced by the in-memory store
INVALID_VERSION_ERROR_CODE = 17125378
CONFLICT_ERROR_CODE = 17125379


class InMemoryOkmsClient(OkmsClient):
    """Thread-safe dictionary-backed secret manager."""

    def __init__(self, secrets: Optional[Dict[str, Dict[str, Any]]] = None):
        """Initialize the store, optionally seeded with path -> value entries."""
        self._lock = threading.Lock()
        self._versions: Dict[str, List[Dict[str, Any]]] = {}
        self._errors: Dict[Tuple[str, str], Exception] = {}
        self.operations: List[Tuple[str, str]] = []
        for path, value in (secrets or {}).items():
            self._versions[path] = [copy.deepcopy(value)]

    def inject_error(self, operation: str, path: str, error: Exception) -> None:
        """Make `operation` ('read', 'list', 'create', 'update', 'delete', 'probe') on `path` raise `error`."""
        self._errors[(operation, path)] = error

    def _check_injected(self, operation: str, path: str) -> None:
        error = self._errors.get((operation, path))
        if error is not None:
            raise error

    def writes(self) -> List[Tuple[str, str]]:
        """Return the (operation, path) pairs of every successful write."""
        return [op for op in self.operations if op[0] in ('create', 'update')]

    def read(self, path: str, version: Optional[int] = None, include_value: bool = True) -> SecretRecord:
        with self._lock:
            self._check_injected('read', path)
            versions = self._versions.get(path)
            if not versions:
                raise NoSecretError(secret_name=path)

            selected = len(versions) if version is None else version
            if selected < 1 or selected > len(versions):
                raise RemoteStoreError(
                    f"version {version} of secret '{path}' does not exist",
                    status_code=404,
                    error_code=INVALID_VERSION_ERROR_CODE,
                    secret_name=path
                )

            return SecretRecord(
                path=path,
                value=copy.deepcopy(versions[selected - 1]) if include_value else None,
                current_version=len(versions),
                cas_required=False
            )

    def list(self, root: str) -> Optional[List[str]]:
        with self._lock:
            self._check_injected('list', root)
            prefix = f"{root}/" if root else ''
            segments: List[str] = []
            for path in sorted(self._versions):
                if not path.startswith(prefix) or len(path) == len(prefix):
                    continue
                remainder = path[len(prefix):]
                if '/' in remainder:
                    segment = remainder.split('/', 1)[0] + '/'
                else:
                    segment = remainder
                if segment not in segments:
                    segments.append(segment)
            return segments

    def create(self, path: str, value: Dict[str, Any]) -> None:
        with self._lock:
            self._check_injected('create', path)
            if path in self._versions:
                raise RemoteStoreError(
                    f"secret '{path}' already exists",
                    status_code=409,
                    error_code=CONFLICT_ERROR_CODE,
                    secret_name=path
                )
            self._versions[path] = [copy.deepcopy(value)]
            self.operations.append(('create', path))
            logger.debug(f"Created secret '{path}' at version 1")

    def update(self, path: str, value: Dict[str, Any], expected_version: Optional[int] = None) -> None:
        with self._lock:
            self._check_injected('update', path)
            versions = self._versions.get(path)
            if not versions:
                raise NoSecretError(secret_name=path)
            if expected_version is not None and expected_version != len(versions):
                raise RemoteStoreError(
                    f"cas mismatch for secret '{path}': expected version {expected_version}, "
                    f"current version {len(versions)}",
                    status_code=409,
                    error_code=CONFLICT_ERROR_CODE,
                    secret_name=path
                )
            versions.append(copy.deepcopy(value))
            self.operations.append(('update', path))
            logger.debug(f"Updated secret '{path}' to version {len(versions)}")

    def delete(self, path: str) -> None:
        with self._lock:
            self._check_injected('delete', path)
            if path not in self._versions:
                raise NoSecretError(secret_name=path)
            del self._versions[path]
            self.operations.append(('delete', path))

    def probe_connectivity(self) -> None:
        self._check_injected('probe', '')
