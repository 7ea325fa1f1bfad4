"""
Object management API endpoints.

Upload, delete and re-classify objects, and mint their URLs. Every endpoint
requires the STORAGE_API_TOKEN bearer token (enforced by the v1 router).
"""
from fastapi import APIRouter, Depends, Query, Request, status

from signed_storage.config import settings
from signed_storage.dependencies.storage import get_storage
from signed_storage.logging_config import setup_logging
from signed_storage.schemas.common import APIResponse
from signed_storage.schemas.objects import (
    ObjectResponseData,
    TemporaryURLResponseData,
    URLResponseData,
)
from signed_storage.storage.base import StorageBackend, Visibility

router = APIRouter(tags=["objects"])

logger = setup_logging()


@router.put(
    "/objects/{key:path}",
    response_model=APIResponse[ObjectResponseData],
    status_code=status.HTTP_201_CREATED,
)
async def put_object(
    key: str,
    request: Request,
    visibility: Visibility = Query(
        Visibility.PUBLIC_READ,
        description="public-read objects get a permanent URL, private ones only signed links.",
    ),
    storage: StorageBackend = Depends(get_storage),
):
    """
    Store the raw request body under the given key.

    Raises:
        InvalidKeyError: Key escapes its root (400)
        ObjectTooLargeError: Body exceeds MAX_UPLOAD_SIZE_MB (413)
        WriteError: Filesystem failure (500)
    """
    stored_key = await storage.put(key, request.stream(), visibility)
    logger.info(f"Object stored: key={stored_key}, visibility={visibility.value}")

    return APIResponse(
        success=True,
        data=ObjectResponseData(key=stored_key, visibility=visibility),
    )


@router.delete(
    "/objects/{key:path}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_object(
    key: str,
    visibility: Visibility | None = Query(
        None, description="Restrict deletion to one visibility root."
    ),
    storage: StorageBackend = Depends(get_storage),
):
    await storage.delete(key, visibility)
    logger.info(f"Object deleted: key={key}")


@router.put(
    "/visibility",
    response_model=APIResponse[ObjectResponseData],
    status_code=status.HTTP_200_OK,
)
async def set_object_visibility(
    key: str = Query(..., description="Object key"),
    visibility: Visibility = Query(..., description="Target visibility"),
    storage: StorageBackend = Depends(get_storage),
):
    """Move an object between the public and private roots."""
    await storage.set_visibility(key, visibility)
    logger.info(f"Object visibility changed: key={key}, visibility={visibility.value}")

    return APIResponse(
        success=True,
        data=ObjectResponseData(key=key, visibility=visibility),
    )


@router.get(
    "/urls/public",
    response_model=APIResponse[URLResponseData],
    status_code=status.HTTP_200_OK,
)
def get_public_url(
    key: str = Query(..., description="Object key"),
    storage: StorageBackend = Depends(get_storage),
):
    """
    Return the permanent URL of a public object.

    Raises:
        NotApplicableError: Object is private (409)
    """
    return APIResponse(success=True, data=URLResponseData(key=key, url=storage.url(key)))


@router.get(
    "/urls/temporary",
    response_model=APIResponse[TemporaryURLResponseData],
    status_code=status.HTTP_200_OK,
)
def get_temporary_url(
    key: str = Query(..., description="Object key"),
    ttl_seconds: int = Query(
        settings.DEFAULT_TEMPORARY_URL_TTL_SECONDS,
        ge=1,
        le=settings.MAX_TEMPORARY_URL_TTL_SECONDS,
        description="Link lifetime in seconds.",
    ),
    storage: StorageBackend = Depends(get_storage),
):
    """
    Return a signed, time-limited URL for a private object.

    Raises:
        NotApplicableError: Object is public (409)
    """
    url = storage.temporary_url(key, ttl_seconds)
    logger.info(f"Temporary URL issued: key={key}, ttl_seconds={ttl_seconds}")

    return APIResponse(
        success=True,
        data=TemporaryURLResponseData(key=key, url=url, ttl_seconds=ttl_seconds),
    )
