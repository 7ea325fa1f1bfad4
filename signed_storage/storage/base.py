"""
Abstract base class for storage backends.

This module defines the interface that all storage backends must implement,
plus the signed-URL builder contract that backends consume to produce
temporary links without depending on any HTTP framework.
"""
from abc import ABC, abstractmethod
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, BinaryIO, Protocol, Union

from signed_storage.storage.exceptions import InvalidArgumentError


class Visibility(str, Enum):
    """Whether an object is served openly or only through signed links."""

    PUBLIC_READ = "public-read"
    PRIVATE = "private"


DataSource = Union[str, bytes, bytearray, BinaryIO, AsyncIterable[bytes]]


class SignedURLBuilder(Protocol):
    """
    Builds a signed, time-limited URL for a private object.

    Implemented by the HTTP layer, which knows the route that serves private
    files and holds the signing secret.
    """

    def build(self, absolute_path: Path, key: str, ttl: timedelta) -> str:
        ...


def coerce_ttl(ttl: timedelta | int | float) -> timedelta:
    """
    Turn a ttl given as a timedelta or a number of seconds into a timedelta.

    Raises:
        InvalidArgumentError: If the ttl is not a positive duration
    """
    if isinstance(ttl, bool):
        raise InvalidArgumentError(f"ttl must be a duration, got {ttl!r}")
    if isinstance(ttl, (int, float)):
        ttl = timedelta(seconds=ttl)
    if not isinstance(ttl, timedelta):
        raise InvalidArgumentError(f"ttl must be a duration, got {type(ttl).__name__}")
    if ttl <= timedelta(0):
        raise InvalidArgumentError("ttl must be a positive duration")
    return ttl


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    All storage implementations (local filesystem, S3, etc.) must implement
    these methods so callers only ever depend on this contract.
    """

    @abstractmethod
    async def put(
        self,
        key: str,
        data: DataSource,
        visibility: Visibility = Visibility.PUBLIC_READ,
    ) -> str:
        """
        Store an object, overwriting any object with the same key and visibility.

        Args:
            key: Object key (forward-slash separated relative path)
            data: Bytes, a binary file object or an async iterator of chunks
            visibility: Visibility that decides the storage root

        Returns:
            Canonical object key

        Raises:
            InvalidKeyError: If the key escapes its root
            ObjectTooLargeError: If the object exceeds the maximum size
            WriteError: If the write fails
        """
        pass

    @abstractmethod
    async def get(
        self,
        key: str,
        visibility: Visibility | None = None,
    ) -> AsyncIterator[bytes]:
        """
        Open an object for streaming reads.

        Args:
            key: Object key
            visibility: Root to read from; both roots are searched when None

        Returns:
            Async iterator yielding the object's bytes in chunks

        Raises:
            InvalidKeyError: If the key escapes its root
            NotFoundError: If the object doesn't exist
        """
        pass

    async def read(self, key: str, visibility: Visibility | None = None) -> bytes:
        """Read a whole object into memory."""
        chunks = []
        async for chunk in await self.get(key, visibility):
            chunks.append(chunk)
        return b"".join(chunks)

    @abstractmethod
    async def delete(self, key: str, visibility: Visibility | None = None) -> None:
        """
        Delete an object from storage.

        Raises:
            NotFoundError: If the object doesn't exist
            WriteError: If the delete operation fails
        """
        pass

    @abstractmethod
    def exists(self, key: str, visibility: Visibility | None = None) -> bool:
        """Check if an object exists, optionally within one visibility only."""
        pass

    @abstractmethod
    def visibility(self, key: str) -> Visibility:
        """
        Report the visibility of a stored object.

        Raises:
            NotFoundError: If the object doesn't exist
        """
        pass

    @abstractmethod
    async def set_visibility(self, key: str, visibility: Visibility) -> None:
        """
        Move an object to the root of another visibility.

        Raises:
            NotFoundError: If the object doesn't exist
            WriteError: If the move fails
        """
        pass

    @abstractmethod
    def url(self, key: str) -> str:
        """
        Return the stable public URL of an object.

        Raises:
            NotApplicableError: If the object is private
        """
        pass

    @abstractmethod
    def temporary_url(self, key: str, ttl: timedelta | int | float) -> str:
        """
        Return a time-limited URL for a private object.

        Args:
            key: Object key
            ttl: Link lifetime as a timedelta or a number of seconds

        Raises:
            InvalidArgumentError: If ttl is not positive
            NotApplicableError: If the object is public
        """
        pass
