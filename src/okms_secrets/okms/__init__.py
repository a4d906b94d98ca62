"""
OKMS client package.

Provides the store contract used by the secrets algorithms and its REST and
in-memory implementations.
"""

from .base_client import OkmsClient
from .in_memory_client import InMemoryOkmsClient
from .rest_client import OkmsRestClient, NOT_FOUND_ERROR_CODE
from .response import SecretRecord

__all__ = [
    'OkmsClient',
    'InMemoryOkmsClient',
    'OkmsRestClient',
    'NOT_FOUND_ERROR_CODE',
    'SecretRecord'
]
