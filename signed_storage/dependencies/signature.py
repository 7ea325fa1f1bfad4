"""
Signed link verification for the private file route.

The route handler only runs once verify_signed_request has accepted the
request; every failure surfaces as a SignedURLError that the application's
exception handlers translate into 400/403/410.
"""
from fastapi import Depends, Request

from signed_storage.config import settings
from signed_storage.services.signed_url import SignedURLVerifier


def get_signed_url_verifier() -> SignedURLVerifier:
    """Return the verifier sharing its secret with the URL builder."""
    return SignedURLVerifier(
        secret=settings.SIGNED_URL_SECRET,
        clock_skew_seconds=settings.SIGNED_URL_CLOCK_SKEW_SECONDS,
    )


def verify_signed_request(
    request: Request,
    verifier: SignedURLVerifier = Depends(get_signed_url_verifier),
) -> int:
    """
    Verify the signature carried by the current request.

    Returns:
        The link's expireAt, for handlers that want to set cache headers

    Raises:
        MalformedSignedURLError: expireAt/signature missing or invalid
        ExpiredLinkError: link used after expiry
        SignatureMismatchError: signature doesn't match
    """
    # scope["path"] is already percent-decoded, unlike the raw request line
    return verifier.verify(request.scope["path"], request.query_params.multi_items())
