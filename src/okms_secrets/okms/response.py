"""
Secret record returned by the OKMS client implementations.

Provides a consistent shape regardless of whether the store is remote or in memory.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class SecretRecord:
    """A secret as read from the store: its value and the store's current version.

    `value` is None when the read was made with include_value=False.
    """
    path: str
    value: Optional[Dict[str, Any]] = None
    current_version: Optional[int] = None
    cas_required: Optional[bool] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
