from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Envelope for successful responses."""

    success: bool = True
    data: T | None = None


class ErrorResponse(BaseModel):
    """Envelope for failures; message is always a static, client-safe text."""

    success: bool = False
    error: str
    message: str
