# app/services/storage.py
"""
Local-disk object storage with public and signed URLs.

Objects live at <root>/<bucket>/<path>. Public buckets are served to
anyone; private buckets need a signed URL (a short-lived JWT carrying the
bucket and path).
"""
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from jose import jwt, JWTError

from app.config import settings
from app.core.errors import NotFoundError, PermissionDenied, StoreError, ValidationError

logger = logging.getLogger(__name__)

TASK_PHOTOS = "task-photos"
CHAT_PHOTOS = "chat-photos"

# bucket -> is public
BUCKETS = {
    TASK_PHOTOS: True,
    CHAT_PHOTOS: False,
}


class ObjectStorage:
    def __init__(self, root: str, base_url: str, secret: str, algorithm: str = "HS256"):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.secret = secret
        self.algorithm = algorithm

    def _resolve(self, bucket: str, path: str) -> Path:
        if bucket not in BUCKETS:
            raise NotFoundError(f"Unknown bucket '{bucket}'")
        parts = Path(path).parts
        if not parts or Path(path).is_absolute() or ".." in parts:
            raise ValidationError("Invalid object path")
        return self.root / bucket / path

    def is_public(self, bucket: str) -> bool:
        return BUCKETS.get(bucket, False)

    def put(self, bucket: str, path: str, data: bytes) -> str:
        target = self._resolve(bucket, path)
        if target.exists():
            raise ValidationError(f"Object '{path}' already exists")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            logger.error("Failed to store %s/%s: %s", bucket, path, e)
            raise StoreError("Object storage unavailable", code="storage_write_failed")
        logger.info("Stored object %s/%s (%d bytes)", bucket, path, len(data))
        return path

    def open(self, bucket: str, path: str) -> Path:
        target = self._resolve(bucket, path)
        if not target.is_file():
            raise NotFoundError("Object not found")
        return target

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/{bucket}/{quote(path)}"

    def signed_url(self, bucket: str, path: str, ttl: Optional[int] = None) -> str:
        ttl = ttl if ttl is not None else settings.SIGNED_URL_TTL_SECONDS
        expire = datetime.now(timezone.utc) + timedelta(seconds=ttl)
        token = jwt.encode(
            {"bucket": bucket, "path": path, "exp": expire},
            self.secret,
            algorithm=self.algorithm,
        )
        return f"{self.public_url(bucket, path)}?token={token}"

    def verify_token(self, bucket: str, path: str, token: Optional[str]) -> None:
        if not token:
            raise PermissionDenied("Signed URL required")
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            raise PermissionDenied("Invalid or expired signed URL")
        if payload.get("bucket") != bucket or payload.get("path") != path:
            raise PermissionDenied("Signed URL does not match object")


storage = ObjectStorage(settings.STORAGE_ROOT, settings.PUBLIC_BASE_URL, settings.SECRET_KEY, settings.ALGORITHM)


def get_storage() -> ObjectStorage:
    return storage
