"""
Secret discovery under a path prefix.

The metadata listing only returns the next path segment of each entry, with a
trailing '/' marking a namespace, so full leaf paths are rebuilt by walking
the namespace depth-first, one listing call at a time.
"""

import logging
from typing import List, Optional

from okms_secrets.okms.base_client import OkmsClient

logger = logging.getLogger(__name__)


def resolve_root(path: Optional[str]) -> Optional[str]:
    """Normalize a user-supplied prefix into a traversal root.

    Args:
        path: Raw prefix, may be None or empty

    Returns:
        The canonical root ('' for the whole namespace), or None when the
        prefix ends with '//' and nothing should be traversed
    """
    if not path:
        return ''
    if len(path) > 1 and path.endswith('//'):
        return None
    if path.endswith('/'):
        return path[:-1]
    return path


def _join(root: str, segment: str) -> str:
    return f"{root}/{segment}" if root else segment


def list_secret_paths(client: OkmsClient, root: str) -> List[str]:
    """Return every leaf secret path under `root`.

    Any listing error aborts the whole walk; no partial result is returned.
    """
    # Secret paths never begin with '/'
    if root.startswith('/'):
        return []

    segments = client.list(root)
    if not segments:
        return []

    leaves: List[str] = []
    for segment in segments:
        if not segment or segment.startswith('/'):
            continue
        if segment.endswith('/'):
            leaves.extend(list_secret_paths(client, _join(root, segment[:-1])))
        else:
            leaves.append(_join(root, segment))
    return leaves


def get_secrets_list(client: OkmsClient, path: Optional[str]) -> List[str]:
    """Resolve a raw prefix and enumerate the leaf paths beneath it."""
    root = resolve_root(path)
    if root is None:
        logger.debug(f"Prefix '{path}' ends with '//', nothing to list")
        return []

    secrets = list_secret_paths(client, root)
    logger.debug(f"Found {len(secrets)} secrets under '{root}'")
    return secrets
