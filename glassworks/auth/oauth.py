import logging
from typing import Dict, Optional

from fastapi import HTTPException
from google.oauth2 import id_token
from google.auth.transport import requests as google_requests

from glassworks.auth.errors import Unauthorized
from glassworks.config import settings

logger = logging.getLogger(__name__)


def verify_google_token(token: str) -> Dict[str, Optional[str]]:
    """
    Verify a Google ID token and return the identity claims.

    Args:
        token: Google OAuth ID token sent by the frontend

    Returns:
        Dict with sub (Google subject id), email, name and picture

    Raises:
        Unauthorized: if the token is invalid or has no email
        HTTPException: 500 if GOOGLE_CLIENT_ID is not configured
    """
    if not settings.google_client_id:
        raise HTTPException(status_code=500, detail="GOOGLE_CLIENT_ID not configured")

    try:
        # clock_skew_in_seconds tolerates small clock drift between us and Google
        idinfo = id_token.verify_oauth2_token(
            token,
            google_requests.Request(),
            settings.google_client_id,
            clock_skew_in_seconds=60,
        )
    except ValueError as e:
        error_msg = str(e)
        if "Token's audience" in error_msg or "Wrong audience" in error_msg:
            logger.warning("Google token audience mismatch, check GOOGLE_CLIENT_ID")
            raise Unauthorized("Token audience mismatch")
        # Provider details are not exposed to the client.
        raise Unauthorized("Invalid Google ID token")

    email = str(idinfo.get("email", "")).strip().lower()
    if not email:
        raise Unauthorized("Email not provided by Google")

    return {
        "sub": str(idinfo.get("sub", "")),
        "email": email,
        "name": idinfo.get("name") or email.split("@")[0],
        "picture": idinfo.get("picture"),
    }
