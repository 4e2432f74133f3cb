# app/routers/auth.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy import select, delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, RevokedToken
from app.models.profile import Profile
from app.models.team import Team, TeamMember
from app.models.task import Task
from app.models.message import Message
from app.schemas.user import UserCreate, LoginRequest, ProfileUpdate, UserResponse, Token
from app.schemas.auth import RefreshRequest, AccessToken
from app.database import get_db
from app.utils.password import hash_password, verify_password
from app.core.security import create_access_token, create_refresh_token, decode_token, new_session_id
from app.core.auth import get_current_user, get_current_profile, get_current_claims, is_revoked
from app.routers.teams import delete_team_cascade

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def user_response(user: User, profile: Profile) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=profile.full_name,
        role=profile.role,
        created_at=profile.created_at,
    )


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(user_in: UserCreate, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == user_in.email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(email=user_in.email, hashed_password=hash_password(user_in.password))
    db.add(user)
    await db.flush()

    # Profile shares the account id
    profile = Profile(id=user.id, full_name=user_in.full_name, role=user_in.role)
    db.add(profile)
    await db.commit()
    await db.refresh(user)
    await db.refresh(profile)
    logger.info("Registered user %s as %s", user.id, profile.role)
    return user_response(user, profile)


@router.post("/login", response_model=Token)
async def login(user_in: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(User).where(User.email == user_in.email))
    user = result.scalar_one_or_none()

    if not user or not user.is_active or not verify_password(user_in.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    profile = await db.get(Profile, user.id)
    if profile is None:
        raise HTTPException(403, "Profile not found for this account")

    # Both tokens carry the sign-in session id so logout can end the whole session
    claims = {"sub": str(user.id), "sid": new_session_id()}
    return Token(
        access_token=create_access_token(claims),
        refresh_token=create_refresh_token(claims),
        token_type="bearer",
        user=user_response(user, profile),
    )


@router.post("/refresh", response_model=AccessToken)
async def refresh(request: RefreshRequest, db: AsyncSession = Depends(get_db)):
    try:
        payload = decode_token(request.refresh_token)
    except JWTError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid refresh token")
    if payload.get("type") != "refresh" or payload.get("sub") is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid refresh token")
    if await is_revoked(db, payload):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Session has been signed out")

    user = await db.get(User, int(payload["sub"]))
    if user is None or not user.is_active:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid refresh token")
    claims = {"sub": str(user.id)}
    if payload.get("sid"):
        claims["sid"] = payload["sid"]
    return AccessToken(access_token=create_access_token(claims))


@router.post("/logout")
async def logout(
    db: AsyncSession = Depends(get_db),
    claims: dict = Depends(get_current_claims)
):
    user_id = int(claims["sub"])
    db.add(RevokedToken(jti=claims["jti"], user_id=user_id))
    if claims.get("sid"):
        # Ends the sign-in session: its refresh token and every access token minted from it
        db.add(RevokedToken(jti=claims["sid"], user_id=user_id))
    await db.commit()
    logger.info("User %s signed out", user_id)
    return {"message": "Signed out"}


@router.get("/me", response_model=UserResponse)
async def read_users_me(
    current_user: User = Depends(get_current_user),
    profile: Profile = Depends(get_current_profile)
):
    return user_response(current_user, profile)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    update_in: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    profile: Profile = Depends(get_current_profile)
):
    # Only the display name is mutable
    profile.full_name = update_in.full_name
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return user_response(current_user, profile)


@router.delete("/me", status_code=204)
async def delete_me(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user_id = current_user.id

    # 1. Owned teams go with everything in them
    owned = await db.execute(select(Team).where(Team.owner_id == user_id))
    for team in owned.scalars().all():
        await delete_team_cascade(db, team)

    # 2. Open reservations are released; chat history goes with the author
    await db.execute(
        update(Task).where(Task.reserved_by == user_id).values(reserved_by=None, reserved_at=None)
    )
    await db.execute(delete(Message).where(Message.user_id == user_id))

    # 3. Memberships, revoked tokens, profile, account
    await db.execute(delete(TeamMember).where(TeamMember.user_id == user_id))
    await db.execute(delete(RevokedToken).where(RevokedToken.user_id == user_id))
    await db.execute(delete(Profile).where(Profile.id == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    logger.info("Deleted account %s", user_id)
