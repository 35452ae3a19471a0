from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sitegen.auth.security import decode_access_token
from sitegen.middleware.error_handler import AuthError

# auto_error=False so a missing header goes through our AuthError response
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> int:
    """Resolve the caller's user id from an `Authorization: Bearer <token>` header."""
    if credentials is None or not credentials.credentials:
        raise AuthError("Access denied: token not provided")
    return decode_access_token(credentials.credentials)["user_id"]
