from fastapi import FastAPI, Request, HTTPException, status
from fastapi.responses import JSONResponse

from signed_storage.api.files import private_router, public_router
from signed_storage.api.v1.router import router as v1_router
from signed_storage.logging_config import setup_logging
from signed_storage.schemas.common import ErrorResponse
from signed_storage.services.signed_url import (
    ExpiredLinkError,
    MalformedSignedURLError,
    SignatureMismatchError,
    SignedURLError,
)
from signed_storage.storage.exceptions import (
    InvalidArgumentError,
    InvalidKeyError,
    NotApplicableError,
    NotFoundError,
    ObjectTooLargeError,
    StorageError,
)

app = FastAPI(title="Signed Storage API")

app.include_router(public_router)
app.include_router(private_router)
app.include_router(v1_router, prefix="/api/v1")

# Setup application logging
logger = setup_logging()

# Exception class -> (status code, error label, client-facing message).
# Messages are static so keys, paths and signatures never reach the client.
ERROR_RESPONSES: dict[type[Exception], tuple[int, str, str]] = {
    InvalidKeyError: (status.HTTP_400_BAD_REQUEST, "Bad Request", "Invalid object key"),
    InvalidArgumentError: (status.HTTP_400_BAD_REQUEST, "Bad Request", "Invalid argument"),
    NotFoundError: (status.HTTP_404_NOT_FOUND, "Not Found", "Object not found"),
    NotApplicableError: (
        status.HTTP_409_CONFLICT,
        "Conflict",
        "Operation not applicable to this object's visibility",
    ),
    ObjectTooLargeError: (
        413,
        "Payload Too Large",
        "Object exceeds maximum allowed size",
    ),
    StorageError: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        "Storage operation failed",
    ),
    MalformedSignedURLError: (
        status.HTTP_400_BAD_REQUEST,
        "Bad Request",
        "Malformed signed URL",
    ),
    SignatureMismatchError: (status.HTTP_403_FORBIDDEN, "Forbidden", "Invalid signature"),
    ExpiredLinkError: (status.HTTP_410_GONE, "Gone", "Signed URL has expired"),
    SignedURLError: (status.HTTP_403_FORBIDDEN, "Forbidden", "Invalid signed URL"),
}


def _lookup_error_response(exc: Exception) -> tuple[int, str, str]:
    for cls in type(exc).__mro__:
        if cls in ERROR_RESPONSES:
            return ERROR_RESPONSES[cls]
    return (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        "An unexpected error occurred",
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Unwrap the 'detail' field from HTTPException responses."""
    content = exc.detail

    if isinstance(content, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content=content
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": "Unauthorized" if exc.status_code == 401 else "Error",
            "message": content
        }
    )


@app.exception_handler(StorageError)
@app.exception_handler(SignedURLError)
async def domain_exception_handler(request: Request, exc: Exception):
    status_code, error, message = _lookup_error_response(exc)

    if status_code >= 500:
        logger.error(
            f"Storage failure: {exc.__class__.__name__}: {str(exc)}",
            exc_info=True,
            extra={"path": request.url.path, "method": request.method},
        )
    else:
        # Log the reason only; the query string carries the signature
        logger.warning(
            f"Request rejected: {exc.__class__.__name__}: {str(exc)}",
            extra={"path": request.url.path, "method": request.method},
        )

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # Log detailed error for debugging (includes stack trace)
    logger.error(
        f"Unhandled exception: {exc.__class__.__name__}: {str(exc)}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    # Return safe, static message to client (no internal details exposed)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
        },
    )
