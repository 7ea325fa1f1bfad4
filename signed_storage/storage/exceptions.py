"""
Storage-specific exceptions.

These exceptions provide detailed error handling for storage operations.
Messages carry object keys only, never absolute filesystem paths.
"""


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class InvalidKeyError(StorageError):
    """Raised when an object key is malformed or escapes its storage root."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid object key {key!r}: {reason}")


class NotFoundError(StorageError):
    """Raised when requested object is not found in storage."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Object not found: {key}")


class WriteError(StorageError):
    """Raised when writing, moving or deleting an object fails."""

    def __init__(self, key: str, message: str = "write failed"):
        self.key = key
        super().__init__(f"Failed to write object {key}: {message}")


class ReadError(StorageError):
    """Raised when reading an object fails."""

    def __init__(self, key: str, message: str = "read failed"):
        self.key = key
        super().__init__(f"Failed to read object {key}: {message}")


class NotApplicableError(StorageError):
    """Raised when a URL kind is requested for an object of the wrong visibility."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)


class InvalidArgumentError(StorageError, ValueError):
    """Raised for invalid call arguments, such as a non-positive ttl."""

    pass


class ObjectTooLargeError(StorageError):
    """Raised when an uploaded object exceeds the maximum size limit."""

    def __init__(self, size: int, max_size: int):
        self.size = size
        self.max_size = max_size
        super().__init__(
            f"Object size ({size} bytes) exceeds maximum allowed size ({max_size} bytes)"
        )
