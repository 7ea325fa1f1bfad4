"""
Storage dependency injection for FastAPI.

This module provides FastAPI dependency functions for injecting
storage backends and the signed URL builder into endpoints.
"""
from signed_storage.config import settings
from signed_storage.services.signed_url import HMACSignedURLBuilder
from signed_storage.storage.base import StorageBackend
from signed_storage.storage.local import LocalStorageBackend


def get_signed_url_builder() -> HMACSignedURLBuilder:
    """Return the signed URL builder for the private file route."""
    return HMACSignedURLBuilder(
        secret=settings.SIGNED_URL_SECRET,
        base_url=settings.SIGNED_URL_BASE_URL,
        route_prefix=settings.SIGNED_URL_ROUTE_PREFIX,
    )


def get_storage() -> StorageBackend:
    """
    Return storage backend based on configuration.

    This allows switching between local and cloud storage
    by changing the STORAGE_BACKEND environment variable.

    Returns:
        StorageBackend instance

    Raises:
        ValueError: If STORAGE_BACKEND is not supported
    """
    if settings.STORAGE_BACKEND == "local":
        return LocalStorageBackend(
            public_root=settings.STORAGE_PUBLIC_ROOT,
            private_root=settings.STORAGE_PRIVATE_ROOT,
            public_base_url=settings.STORAGE_PUBLIC_BASE_URL,
            signed_url_builder=get_signed_url_builder(),
            max_size_mb=settings.MAX_UPLOAD_SIZE_MB,
        )

    if settings.STORAGE_BACKEND in ("s3", "oss"):
        raise ValueError(
            f"Storage backend {settings.STORAGE_BACKEND!r} is not implemented yet"
        )

    raise ValueError(f"Unknown storage backend: {settings.STORAGE_BACKEND}")
