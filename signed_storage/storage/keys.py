"""Object key normalisation and root confinement."""
from pathlib import Path

from signed_storage.storage.exceptions import InvalidKeyError


def normalize_key(key: str) -> str:
    """
    Normalise an object key into its canonical forward-slash form.

    Empty segments and ``.`` segments are dropped, so ``a//b/./c`` becomes
    ``a/b/c``. Anything that could address a file outside its root is
    rejected rather than rewritten.

    Args:
        key: Raw object key supplied by the caller

    Returns:
        Canonical object key

    Raises:
        InvalidKeyError: If the key is empty, absolute, contains backslashes,
            NUL bytes or ``..`` segments
    """
    if not isinstance(key, str) or not key:
        raise InvalidKeyError(str(key), "key must be a non-empty string")
    if "\x00" in key:
        raise InvalidKeyError(key, "key must not contain NUL bytes")
    if "\\" in key:
        raise InvalidKeyError(key, "key must use forward slashes")
    if key.startswith("/"):
        raise InvalidKeyError(key, "key must be relative")

    segments = [s for s in key.split("/") if s not in ("", ".")]
    if ".." in segments:
        raise InvalidKeyError(key, "key must not contain '..' segments")
    if not segments:
        raise InvalidKeyError(key, "key must name an object")

    return "/".join(segments)


def resolve_key(root: Path, key: str) -> Path:
    """
    Join a key onto a root and make sure the result stays inside it.

    Symlinks are followed, so a link inside the root pointing elsewhere is
    rejected as well.

    Args:
        root: Absolute storage root
        key: Raw object key

    Returns:
        Absolute path of the object under ``root``

    Raises:
        InvalidKeyError: If the key is invalid or resolves outside ``root``
    """
    normalized = normalize_key(key)
    resolved_root = root.resolve()
    target = (resolved_root / normalized).resolve()

    if target == resolved_root or not target.is_relative_to(resolved_root):
        raise InvalidKeyError(key, "key resolves outside its storage root")

    return resolved_root / normalized
