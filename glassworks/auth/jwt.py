from datetime import timedelta
from typing import Any, Dict, Optional

from jose import jwt, JWTError
from fastapi import HTTPException

from glassworks.config import settings
from glassworks.model.base import utc_now

JWT_ALGORITHM = "HS256"


def create_access_token(
    account_id: int,
    email: str,
    role: str,
    device_id: Optional[str] = None,
) -> str:
    """
    Create the system JWT for an admitted login.

    Args:
        account_id: account primary key (goes in `sub`)
        email: account email
        role: account role (user, admin)
        device_id: device the session was admitted for, if the client sent one

    Returns:
        Encoded JWT
    """
    now = utc_now()
    payload: Dict[str, Any] = {
        "sub": str(account_id),
        "email": email,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=settings.jwt_expiration_hours)).timestamp()),
        "iss": settings.jwt_issuer,
    }
    if device_id:
        payload["device_id"] = device_id
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode a system JWT.

    Raises:
        HTTPException: 401 if the token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            issuer=settings.jwt_issuer,
        )
    except JWTError:
        # Do not leak decoding details in the error payload.
        raise HTTPException(status_code=401, detail="Invalid token")
