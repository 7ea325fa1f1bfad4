"""
Local filesystem storage implementation.

This module provides a local filesystem implementation of the storage backend
with async file operations over two roots, one per visibility:

    <public_root>/<key>
    <private_root>/<key>

In-progress writes are staged in a sibling directory of each root and
renamed into place once complete.

Public objects get a permanent URL under ``public_base_url``. Private objects
are only reachable through temporary URLs produced by the injected
``SignedURLBuilder``.
"""
import contextlib
import uuid
from datetime import timedelta
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, BinaryIO
from urllib.parse import quote

import aiofiles
import aiofiles.os

from signed_storage.storage.base import (
    DataSource,
    SignedURLBuilder,
    StorageBackend,
    Visibility,
    coerce_ttl,
)
from signed_storage.storage.exceptions import (
    InvalidArgumentError,
    NotApplicableError,
    NotFoundError,
    ObjectTooLargeError,
    ReadError,
    WriteError,
)
from signed_storage.storage.keys import normalize_key, resolve_key

CHUNK_SIZE = 64 * 1024  # 64KB


async def _iter_buffer(data: bytes) -> AsyncIterator[bytes]:
    for offset in range(0, len(data), CHUNK_SIZE):
        yield data[offset:offset + CHUNK_SIZE]


async def _iter_file_object(file_obj: BinaryIO) -> AsyncIterator[bytes]:
    while True:
        chunk = file_obj.read(CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


def _describe(error: OSError) -> str:
    # strerror never includes the filename, so no absolute path leaks out
    return error.strerror or error.__class__.__name__


class LocalStorageBackend(StorageBackend):
    """
    Local filesystem storage with async operations.

    Visibility is not recorded anywhere: it is inferred from the root that
    holds the file. Writes go to a temporary file in a staging directory
    beside the root and are renamed into place, so readers never observe a
    partially written object.
    """

    def __init__(
        self,
        public_root: str | Path,
        private_root: str | Path,
        public_base_url: str,
        signed_url_builder: SignedURLBuilder | None = None,
        max_size_mb: int = 1000,
    ):
        """
        Initialize local storage backend.

        Args:
            public_root: Directory holding publicly readable objects
            private_root: Directory holding private objects
            public_base_url: URL prefix under which public_root is served
            signed_url_builder: Builder used for temporary URLs
            max_size_mb: Maximum object size in MB
        """
        self.public_root = Path(public_root).resolve()
        self.private_root = Path(private_root).resolve()
        self.public_base_url = public_base_url
        self.signed_url_builder = signed_url_builder
        self.max_size_bytes = max_size_mb * 1024 * 1024
        self.roots: dict[Visibility, Path] = {
            Visibility.PUBLIC_READ: self.public_root,
            Visibility.PRIVATE: self.private_root,
        }

    def path(self, key: str, visibility: Visibility) -> Path:
        """
        Absolute filesystem path of an object.

        Raises:
            InvalidKeyError: If the key escapes its root
        """
        return resolve_key(self.roots[Visibility(visibility)], key)

    async def put(
        self,
        key: str,
        data: DataSource,
        visibility: Visibility = Visibility.PUBLIC_READ,
    ) -> str:
        """
        Stream an object to disk in chunks and rename it into place.

        Raises:
            InvalidKeyError: If the key escapes its root
            InvalidArgumentError: If data is not a supported source
            ObjectTooLargeError: If the object exceeds the maximum size
            WriteError: If the write fails
        """
        normalized = normalize_key(key)
        file_path = self.path(normalized, visibility)
        chunks = self._iter_chunks(data)
        temp_path = self._staging_directory(visibility) / f"{uuid.uuid4().hex}.tmp"

        total_size = 0
        try:
            self._ensure_directory_exists(file_path)
            self._ensure_directory_exists(temp_path)

            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in chunks:
                    total_size += len(chunk)

                    if total_size > self.max_size_bytes:
                        raise ObjectTooLargeError(total_size, self.max_size_bytes)

                    await f.write(chunk)

            # Atomic move (rename)
            await aiofiles.os.replace(temp_path, file_path)

        except OSError as e:
            raise WriteError(normalized, _describe(e)) from e

        finally:
            # Clean up partial file on error
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)

        return normalized

    async def get(
        self,
        key: str,
        visibility: Visibility | None = None,
    ) -> AsyncIterator[bytes]:
        """
        Open an object for streaming reads.

        Without a visibility the public root is searched first, then the
        private root.

        Raises:
            InvalidKeyError: If the key escapes its root
            NotFoundError: If the object doesn't exist
        """
        _, file_path = self._locate(key, visibility)
        return self._stream_file(normalize_key(key), file_path)

    async def delete(self, key: str, visibility: Visibility | None = None) -> None:
        """
        Delete an object and prune directories left empty by it.

        Raises:
            NotFoundError: If the object doesn't exist
            WriteError: If the delete operation fails
        """
        found, file_path = self._locate(key, visibility)

        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError as e:
            raise NotFoundError(normalize_key(key)) from e
        except OSError as e:
            raise WriteError(normalize_key(key), _describe(e)) from e

        self._prune_empty_directories(file_path.parent, self.roots[found])

    def exists(self, key: str, visibility: Visibility | None = None) -> bool:
        try:
            self._locate(key, visibility)
        except NotFoundError:
            return False
        return True

    def visibility(self, key: str) -> Visibility:
        """
        Infer visibility from the root holding the object.

        An object present in both roots reports as public.

        Raises:
            NotFoundError: If the object doesn't exist
        """
        found, _ = self._locate(key)
        return found

    async def set_visibility(self, key: str, visibility: Visibility) -> None:
        """
        Move an object into the root of the given visibility.

        Afterwards the key exists under that visibility only. If the target
        root already holds the key, that copy is kept and copies in the other
        roots are removed.

        Raises:
            NotFoundError: If the object doesn't exist
            WriteError: If the move or removal fails
        """
        visibility = Visibility(visibility)
        normalized = normalize_key(key)
        target = self.path(normalized, visibility)

        if not self.exists(normalized, visibility):
            found, source = self._locate(normalized)
            try:
                self._ensure_directory_exists(target)
                await aiofiles.os.replace(source, target)
            except OSError as e:
                raise WriteError(normalized, _describe(e)) from e
            self._prune_empty_directories(source.parent, self.roots[found])

        for other in self.roots:
            if other is visibility or not self.exists(normalized, other):
                continue
            stale = self.path(normalized, other)
            try:
                await aiofiles.os.remove(stale)
            except FileNotFoundError:
                pass
            except OSError as e:
                raise WriteError(normalized, _describe(e)) from e
            self._prune_empty_directories(stale.parent, self.roots[other])

    def url(self, key: str) -> str:
        """
        Return ``public_base_url`` joined with the key.

        Raises:
            InvalidKeyError: If the key escapes its root
            NotApplicableError: If the object only exists as a private object
        """
        normalized = normalize_key(key)
        if self.exists(normalized, Visibility.PRIVATE) and not self.exists(
            normalized, Visibility.PUBLIC_READ
        ):
            raise NotApplicableError(
                normalized,
                f"Object {normalized} is private and has no permanent URL",
            )

        return f"{self.public_base_url.rstrip('/')}/{quote(normalized)}"

    def temporary_url(self, key: str, ttl: timedelta | int | float) -> str:
        """
        Delegate to the signed URL builder with the object's private path.

        Raises:
            InvalidArgumentError: If ttl is not positive
            InvalidKeyError: If the key escapes its root
            NotApplicableError: If the object only exists as a public object,
                or no signed URL builder is configured
        """
        ttl = coerce_ttl(ttl)
        normalized = normalize_key(key)

        if self.signed_url_builder is None:
            raise NotApplicableError(
                normalized, "Temporary URLs are not configured for this storage"
            )
        if self.exists(normalized, Visibility.PUBLIC_READ) and not self.exists(
            normalized, Visibility.PRIVATE
        ):
            raise NotApplicableError(
                normalized,
                f"Object {normalized} is public; use its permanent URL",
            )

        absolute_path = self.path(normalized, Visibility.PRIVATE)
        return self.signed_url_builder.build(absolute_path, normalized, ttl)

    def _locate(
        self, key: str, visibility: Visibility | None = None
    ) -> tuple[Visibility, Path]:
        """Find the root holding the object and its absolute path."""
        candidates = list(self.roots) if visibility is None else [Visibility(visibility)]

        for candidate in candidates:
            file_path = self.path(key, candidate)
            if file_path.is_file():
                return candidate, file_path

        raise NotFoundError(normalize_key(key))

    def _iter_chunks(self, data: DataSource) -> AsyncIterable[bytes]:
        if isinstance(data, str):
            data = data.encode("utf-8")
        if isinstance(data, (bytes, bytearray, memoryview)):
            return _iter_buffer(bytes(data))
        if hasattr(data, "__aiter__"):
            return data
        if hasattr(data, "read"):
            return _iter_file_object(data)
        raise InvalidArgumentError(
            f"Unsupported data source: {type(data).__name__}"
        )

    async def _stream_file(self, key: str, file_path: Path) -> AsyncIterator[bytes]:
        try:
            async with aiofiles.open(file_path, "rb") as f:
                while True:
                    chunk = await f.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    yield chunk
        except FileNotFoundError as e:
            raise NotFoundError(key) from e
        except OSError as e:
            raise ReadError(key, _describe(e)) from e

    def _staging_directory(self, visibility: Visibility) -> Path:
        """
        Directory for in-progress writes, next to (not inside) the root.

        Structure: <root parent>/.<root name>.staging/<uuid>.tmp

        Being a sibling keeps it on the root's filesystem, so the final
        rename stays atomic, while partial files never sit under a served path.
        """
        root = self.roots[Visibility(visibility)]
        return root.parent / f".{root.name}.staging"

    def _ensure_directory_exists(self, file_path: Path) -> None:
        """
        Ensure the parent directory exists.

        Args:
            file_path: File path that needs parent directory
        """
        file_path.parent.mkdir(parents=True, exist_ok=True)

    def _prune_empty_directories(self, directory: Path, root: Path) -> None:
        """Remove empty directories between ``directory`` and ``root``."""
        while directory != root and directory.is_relative_to(root):
            try:
                directory.rmdir()
            except OSError:
                # Directory not empty, stop pruning
                break
            directory = directory.parent
