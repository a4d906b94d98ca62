"""
Abstract OKMS client contract.

This is the only surface the discovery and push algorithms use to talk to the
secret manager, so they stay independent of the wire protocol.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .response import SecretRecord


class OkmsClient(ABC):
    """Abstract base class for secret manager clients.

    Every method raises NoSecretError when the target path holds no secret and
    RemoteStoreError for any other failure.
    """

    @abstractmethod
    def read(self, path: str, version: Optional[int] = None, include_value: bool = True) -> SecretRecord:
        """Read the secret at `path`, optionally pinned to `version`."""
        pass

    @abstractmethod
    def list(self, root: str) -> Optional[List[str]]:
        """List the next path segment of every entry under `root`.

        Entries ending with '/' are namespaces, the others are leaves. An empty
        root lists the top of the namespace.
        """
        pass

    @abstractmethod
    def create(self, path: str, value: Dict[str, Any]) -> None:
        """Create a new secret at `path`."""
        pass

    @abstractmethod
    def update(self, path: str, value: Dict[str, Any], expected_version: Optional[int] = None) -> None:
        """Write a new version of the secret at `path`.

        When `expected_version` is set the store rejects the write unless it is
        still the current version.
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete the secret at `path`."""
        pass

    @abstractmethod
    def probe_connectivity(self) -> None:
        """Make a cheap authenticated call to check the store is reachable."""
        pass

    def cleanup(self) -> None:
        """Release transport resources. Nothing to do by default."""
        pass
