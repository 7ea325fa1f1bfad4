"""
Storage abstraction layer for object operations.

This package provides a backend-agnostic interface for storing byte streams
under path-like keys, with public objects reachable by permanent URL and
private objects only through signed, time-limited URLs.
"""

from signed_storage.storage.base import SignedURLBuilder, StorageBackend, Visibility
from signed_storage.storage.local import LocalStorageBackend
from signed_storage.storage.exceptions import (
    InvalidArgumentError,
    InvalidKeyError,
    NotApplicableError,
    NotFoundError,
    ObjectTooLargeError,
    ReadError,
    StorageError,
    WriteError,
)

__all__ = [
    "StorageBackend",
    "LocalStorageBackend",
    "SignedURLBuilder",
    "Visibility",
    "StorageError",
    "InvalidKeyError",
    "NotFoundError",
    "WriteError",
    "ReadError",
    "NotApplicableError",
    "InvalidArgumentError",
    "ObjectTooLargeError",
]
