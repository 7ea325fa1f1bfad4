"""
Signed URLs for private objects.

Signature format shared by the URL builder and the verifier:

- Message: canonical JSON ``{"expireAt":"<unix seconds>","requestURI":"<uri>"}``
  (sorted keys, no whitespace)
- Signature: unpadded base64url of HMAC-SHA512(secret, message)
- The request URI is the percent-quoted path followed by every query
  parameter except ``signature``, sorted and urlencoded

Query parameters produced:

- expireAt: decimal unix seconds after which the link is rejected
- signature: the signature above

SECURITY: never log the secret or a signature.
"""
import base64
import hashlib
import hmac
import json
import math
import re
import time
from datetime import timedelta
from pathlib import Path
from typing import Callable, Iterable, Mapping
from urllib.parse import quote, urlencode

EXPIRE_AT_PARAM = "expireAt"
SIGNATURE_PARAM = "signature"

# Unix seconds, at most 20 digits
_DECIMAL = re.compile(r"[0-9]{1,20}")

QueryParams = Mapping[str, str] | Iterable[tuple[str, str]]


class SignedURLError(Exception):
    """Base exception for signed URL verification."""

    pass


class MalformedSignedURLError(SignedURLError):
    """Raised when expireAt or signature is missing or unparseable."""

    pass


class ExpiredLinkError(SignedURLError):
    """Raised when a signed URL is used after its expiry."""

    def __init__(self, expire_at: int):
        self.expire_at = expire_at
        super().__init__(f"Signed URL expired at {expire_at}")


class SignatureMismatchError(SignedURLError):
    """Raised when the recomputed signature differs from the presented one."""

    def __init__(self):
        super().__init__("Signature mismatch")


def _items(params: QueryParams) -> list[tuple[str, str]]:
    if isinstance(params, Mapping):
        return list(params.items())
    return list(params)


def canonical_request_uri(path: str, params: QueryParams) -> str:
    """
    Build the canonical request URI that gets signed.

    Args:
        path: Decoded request path, e.g. ``/files/private/user-files/a.txt``
        params: Query parameters; ``signature`` is ignored

    Returns:
        Quoted path, plus ``?`` and the sorted remaining parameters if any
    """
    pairs = sorted((k, v) for k, v in _items(params) if k != SIGNATURE_PARAM)
    uri = quote(path, safe="/")
    if pairs:
        uri += "?" + urlencode(pairs)
    return uri


def compute_signature(secret: str, expire_at: int | str, request_uri: str) -> str:
    """
    Compute the signature for an expiry and canonical request URI.

    Args:
        secret: Shared signing secret
        expire_at: Unix seconds, exactly as carried in the query string
        request_uri: Output of canonical_request_uri

    Returns:
        Unpadded base64url HMAC-SHA512 digest
    """
    message = json.dumps(
        {"expireAt": str(expire_at), "requestURI": request_uri},
        sort_keys=True,
        separators=(",", ":"),
    )
    digest = hmac.new(
        key=secret.encode("utf-8"),
        msg=message.encode("utf-8"),
        digestmod=hashlib.sha512,
    ).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class HMACSignedURLBuilder:
    """
    Signed URL builder for the private file route.

    Implements the storage layer's SignedURLBuilder protocol. The storage
    backend hands over the object's absolute path, but the link only ever
    names the route and key, so filesystem layout never reaches clients.
    """

    def __init__(
        self,
        secret: str,
        base_url: str,
        route_prefix: str = "/files/private",
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("Signing secret must not be empty")
        self._secret = secret
        self.base_url = base_url.rstrip("/")
        self.route_prefix = "/" + route_prefix.strip("/")
        self.clock = clock

    def build(self, absolute_path: Path, key: str, ttl: timedelta) -> str:
        seconds = ttl.total_seconds()
        if seconds <= 0:
            raise ValueError("ttl must be a positive duration")

        expire_at = int(self.clock()) + math.ceil(seconds)
        params = [(EXPIRE_AT_PARAM, str(expire_at))]
        request_uri = canonical_request_uri(f"{self.route_prefix}/{key}", params)
        signature = compute_signature(self._secret, expire_at, request_uri)

        return f"{self.base_url}{request_uri}&{urlencode({SIGNATURE_PARAM: signature})}"


class SignedURLVerifier:
    """
    Verifies signed requests for private objects.

    Steps, each failure terminal:
    1. Parse: exactly one numeric expireAt and one signature
    2. Expiry check: reject once now > expireAt + clock_skew_seconds
    3. Recompute the signature over the canonical request URI
    4. Constant-time compare
    """

    def __init__(
        self,
        secret: str,
        clock_skew_seconds: int = 0,
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("Signing secret must not be empty")
        if clock_skew_seconds < 0:
            raise ValueError("clock_skew_seconds must not be negative")
        self._secret = secret
        self.clock_skew_seconds = clock_skew_seconds
        self.clock = clock

    def verify(self, path: str, params: QueryParams) -> int:
        """
        Verify a request's path and query parameters.

        Args:
            path: Decoded request path
            params: All query parameters of the request

        Returns:
            The link's expireAt

        Raises:
            MalformedSignedURLError: If expireAt or signature is missing/invalid
            ExpiredLinkError: If the link has expired
            SignatureMismatchError: If the signature doesn't match
        """
        items = _items(params)
        expire_values = [v for k, v in items if k == EXPIRE_AT_PARAM]
        signatures = [v for k, v in items if k == SIGNATURE_PARAM]

        if len(expire_values) != 1 or not _DECIMAL.fullmatch(expire_values[0]):
            raise MalformedSignedURLError("Missing or non-numeric expireAt")
        if len(signatures) != 1 or not signatures[0]:
            raise MalformedSignedURLError("Missing signature")

        raw_expire_at = expire_values[0]
        expire_at = int(raw_expire_at)
        if self.clock() > expire_at + self.clock_skew_seconds:
            raise ExpiredLinkError(expire_at)

        expected = compute_signature(
            self._secret, raw_expire_at, canonical_request_uri(path, items)
        )
        if not hmac.compare_digest(
            expected.encode("utf-8"), signatures[0].encode("utf-8")
        ):
            raise SignatureMismatchError()

        return expire_at
