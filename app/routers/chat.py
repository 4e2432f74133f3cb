# app/routers/chat.py
import asyncio
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List

from app.database import get_db
from app.core.auth import get_current_profile
from app.core.errors import PermissionDenied, ValidationError
from app.core.permissions import Action, require
from app.models.message import Message
from app.models.profile import Profile
from app.schemas.message import MessageCreate, MessageResponse
from app.services.change_feed import publish_row, INSERT
from app.services.leaderboard import UNKNOWN_NAME
from app.services.storage import ObjectStorage, get_storage, CHAT_PHOTOS
from app.services.teams import get_team, require_team_role, profile_names

router = APIRouter(prefix="/teams", tags=["chat"])

PHOTO_ONLY_CONTENT = "Photo"


def message_response(message: Message, author_name: str, storage: ObjectStorage) -> MessageResponse:
    return MessageResponse(
        id=message.id,
        team_id=message.team_id,
        user_id=message.user_id,
        author_name=author_name or UNKNOWN_NAME,
        content=message.content,
        photo_url=storage.signed_url(CHAT_PHOTOS, message.photo_url) if message.photo_url else None,
        created_at=message.created_at,
    )


@router.post("/{team_id}/messages", response_model=MessageResponse, status_code=201)
async def send_message(
    team_id: int,
    message_in: MessageCreate,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
    storage: ObjectStorage = Depends(get_storage)
):
    """
    Post a text and/or photo message to the team chat.
    A photo must already be uploaded to the chat-photos bucket.
    """
    team = await get_team(db, team_id)
    role = await require_team_role(db, team, profile.id)
    require(profile.role, role, Action.POST_MESSAGE)

    content = (message_in.content or "").strip()
    photo_path = (message_in.photo_path or "").strip() or None
    if not content and not photo_path:
        raise ValidationError("Message needs text or a photo")
    if photo_path:
        # Uploads are keyed <user_id>/...; only the poster's own photos can be attached
        if not photo_path.startswith(f"{profile.id}/"):
            raise PermissionDenied("Photo was uploaded by another user")
        # Raises NotFoundError if the upload never happened
        await asyncio.to_thread(storage.open, CHAT_PHOTOS, photo_path)

    message = Message(
        team_id=team.id,
        user_id=profile.id,
        content=content or PHOTO_ONLY_CONTENT,
        photo_url=photo_path,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)
    publish_row("messages", INSERT, message)
    return message_response(message, profile.full_name, storage)


@router.get("/{team_id}/messages", response_model=List[MessageResponse])
async def get_messages(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile),
    storage: ObjectStorage = Depends(get_storage)
):
    team = await get_team(db, team_id)
    await require_team_role(db, team, profile.id)

    result = await db.execute(
        select(Message)
        .where(Message.team_id == team.id)
        .order_by(Message.created_at, Message.id)
    )
    messages = result.scalars().all()
    names = await profile_names(db, [m.user_id for m in messages])
    return [message_response(m, names.get(m.user_id), storage) for m in messages]
