# app/routers/storage.py
import asyncio
import logging
import time
import uuid
from pathlib import PurePosixPath
from typing import Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse

from app.config import settings
from app.core.auth import get_current_profile
from app.core.errors import ValidationError
from app.models.profile import Profile
from app.schemas.message import UploadResponse
from app.services.storage import ObjectStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage", tags=["storage"])

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "heic"}


@router.post("/{bucket}", response_model=UploadResponse, status_code=201)
async def upload_object(
    bucket: str,
    file: UploadFile = File(...),
    profile: Profile = Depends(get_current_profile),
    storage: ObjectStorage = Depends(get_storage)
):
    """Upload a photo; stored as <user_id>/<timestamp>-<random>.<ext>."""
    ext = PurePosixPath(file.filename or "").suffix.lstrip(".").lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(f"Unsupported file type '{ext or 'none'}'")

    data = await file.read()
    if not data:
        raise ValidationError("Empty file")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError("File too large")

    path = f"{profile.id}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{ext}"
    await asyncio.to_thread(storage.put, bucket, path, data)

    if storage.is_public(bucket):
        url = storage.public_url(bucket, path)
    else:
        url = storage.signed_url(bucket, path)
    return UploadResponse(bucket=bucket, path=path, url=url)


@router.get("/{bucket}/{path:path}")
async def download_object(
    bucket: str,
    path: str,
    token: Optional[str] = Query(None),
    storage: ObjectStorage = Depends(get_storage)
):
    if not storage.is_public(bucket):
        storage.verify_token(bucket, path, token)
    target = await asyncio.to_thread(storage.open, bucket, path)
    return FileResponse(target)
