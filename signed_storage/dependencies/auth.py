import hmac

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from signed_storage.config import settings

# HTTPBearer reads "Authorization: Bearer <token>" and rejects requests
# without one before the dependency below runs
security = HTTPBearer()


def require_api_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> None:
    expected = settings.STORAGE_API_TOKEN
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "success": False,
                "error": "Forbidden",
                "message": "Object API is disabled",
            },
        )

    if not hmac.compare_digest(
        credentials.credentials.encode("utf-8"), expected.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "error": "Unauthorized",
                "message": "Invalid token",
            },
        )
