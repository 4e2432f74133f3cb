from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.database import get_db
from app.models.user import User, RevokedToken
from app.models.profile import Profile
from app.core.security import decode_token, revocation_keys

reusable_oauth2 = HTTPBearer()

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


async def is_revoked(db: AsyncSession, payload: dict) -> bool:
    keys = revocation_keys(payload)
    if not keys:
        return False
    result = await db.execute(select(RevokedToken.id).where(RevokedToken.jti.in_(keys)).limit(1))
    return result.scalar_one_or_none() is not None


async def resolve_token(db: AsyncSession, token: str) -> tuple:
    """Return (user, claims) for a valid, unrevoked access token."""
    try:
        payload = decode_token(token)
        user_id: str = payload.get("sub")
        if user_id is None or payload.get("type") != "access":
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    if await is_revoked(db, payload):
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == int(user_id)))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise credentials_exception
    return user, payload


async def get_current_claims(
    db: AsyncSession = Depends(get_db),
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
) -> dict:
    _, payload = await resolve_token(db, token.credentials)
    return payload


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
) -> User:
    user, _ = await resolve_token(db, token.credentials)
    return user


async def get_current_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
) -> Profile:
    profile = await db.get(Profile, current_user.id)
    if profile is None:
        raise HTTPException(403, "Profile not found for this account")
    return profile
