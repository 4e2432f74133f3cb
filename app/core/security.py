# app/core/security.py
import uuid
from datetime import datetime, timedelta, timezone
from jose import jwt
from app.config import settings


def new_session_id() -> str:
    return uuid.uuid4().hex


def _encode(data: dict, expires_delta: timedelta, token_type: str) -> str:
    payload = data.copy()
    payload.update({
        "exp": datetime.now(timezone.utc) + expires_delta,
        "jti": uuid.uuid4().hex,
        "type": token_type,
    })
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(data: dict) -> str:
    return _encode(data, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES), "access")


def create_refresh_token(data: dict) -> str:
    return _encode(data, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS), "refresh")


def decode_token(token: str) -> dict:
    """Raises jose.JWTError on a bad signature or an expired token."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def revocation_keys(payload: dict) -> list:
    """Ids that revoke a token: its own jti and the sign-in session (sid) it belongs to."""
    return [key for key in (payload.get("jti"), payload.get("sid")) if key]
