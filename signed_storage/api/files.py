"""
File serving endpoints.

Public objects are served to anyone. Private objects are served only to
requests carrying a valid, unexpired signature produced by the signed URL
builder; verification runs as a dependency before the handler.
"""
import mimetypes

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from signed_storage.config import settings
from signed_storage.dependencies.signature import verify_signed_request
from signed_storage.dependencies.storage import get_storage
from signed_storage.storage.base import StorageBackend, Visibility

public_router = APIRouter(prefix=settings.STORAGE_PUBLIC_ROUTE_PREFIX, tags=["files"])
private_router = APIRouter(prefix=settings.SIGNED_URL_ROUTE_PREFIX, tags=["files"])


async def _stream_object(
    storage: StorageBackend, key: str, visibility: Visibility
) -> StreamingResponse:
    stream = await storage.get(key, visibility)
    media_type, _ = mimetypes.guess_type(key)
    return StreamingResponse(stream, media_type=media_type or "application/octet-stream")


@public_router.get("/{key:path}")
async def download_public_file(
    key: str,
    storage: StorageBackend = Depends(get_storage),
):
    """
    Serve a public object.

    Raises:
        InvalidKeyError: Key escapes the public root (400)
        NotFoundError: No public object under this key (404)
    """
    return await _stream_object(storage, key, Visibility.PUBLIC_READ)


@private_router.get("/{key:path}", dependencies=[Depends(verify_signed_request)])
async def download_private_file(
    key: str,
    storage: StorageBackend = Depends(get_storage),
):
    """
    Serve a private object to the holder of a signed link.

    Raises:
        MalformedSignedURLError: expireAt/signature missing or invalid (400)
        SignatureMismatchError: Tampered or foreign link (403)
        ExpiredLinkError: Link used after expireAt (410)
        NotFoundError: No private object under this key (404)
    """
    response = await _stream_object(storage, key, Visibility.PRIVATE)
    response.headers["Cache-Control"] = "private, no-store"
    return response
