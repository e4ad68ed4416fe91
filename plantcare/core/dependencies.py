"""
Common dependencies for FastAPI routes.
"""

from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from plantcare.core.config import get_settings
from plantcare.core.exceptions import UnauthorizedException

# HTTP Bearer token security scheme
security = HTTPBearer()


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate a JWT issued by the auth service."""
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> dict:
    """
    Dependency to get the current authenticated user from JWT token.
    Returns user dict with 'id', 'email' and 'household_id'.
    """
    payload = decode_token(credentials.credentials)

    if not payload or not payload.get("household_id"):
        raise UnauthorizedException("Invalid or expired token")

    return {
        "id": payload["sub"],
        "email": payload.get("email"),
        "household_id": str(payload["household_id"]),
    }
