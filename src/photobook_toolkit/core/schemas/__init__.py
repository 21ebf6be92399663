"""
Schemas Package

JSON schema definition and validation for album snapshots.
"""

from .validator import (
    SNAPSHOT_MARKER,
    SNAPSHOT_WRAPPER_VERSION,
    ValidationError,
    is_wrapped_snapshot,
    validate_album,
    validate_snapshot,
)

__all__ = [
    "SNAPSHOT_MARKER",
    "SNAPSHOT_WRAPPER_VERSION",
    "ValidationError",
    "is_wrapped_snapshot",
    "validate_album",
    "validate_snapshot",
]
