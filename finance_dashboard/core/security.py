from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Header
from pydantic import BaseModel

from finance_dashboard.core.config import settings
from finance_dashboard.core.errors import UnauthenticatedError

DEFAULT_PROFILE = "default-avatar.png"


class CurrentUser(BaseModel):
    user_id: str
    profile: str = DEFAULT_PROFILE


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a bearer token for the given claims. The API never issues tokens
    itself; this serves test fixtures and operator tooling that need a token
    the API will accept.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token expired")
    except jwt.InvalidTokenError:
        raise UnauthenticatedError("Invalid token")


def get_current_user(authorization: Optional[str] = Header(None)) -> CurrentUser:
    """Resolve the caller identity from the bearer token."""
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthenticatedError("Authentication required. Please provide a valid Bearer token.")

    token = authorization.replace("Bearer ", "", 1)
    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthenticatedError("Invalid token")
    return CurrentUser(user_id=str(user_id), profile=payload.get("profile") or DEFAULT_PROFILE)
