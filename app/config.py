from pydantic_settings import BaseSettings
from typing import Optional
from pydantic import Field

class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7)

    DATABASE_URL: str
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = Field(False)

    LOG_LEVEL: str = Field("INFO")

    # Object storage: files live under STORAGE_ROOT/<bucket>/<path>
    STORAGE_ROOT: str = Field("./storage")
    PUBLIC_BASE_URL: str = Field("http://localhost:8000")
    SIGNED_URL_TTL_SECONDS: int = Field(3600)
    MAX_UPLOAD_BYTES: int = Field(10 * 1024 * 1024)

    # Multi-photo workflow → at least 3 evidence photos, otherwise 1
    MULTI_PHOTO_WORKFLOW: bool = Field(True)
    MAX_EVIDENCE_PHOTOS: int = Field(10)

    # Off by default: any team employee may complete an assigned task
    ENFORCE_ASSIGNEE: bool = Field(False)

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        return self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL or "sqlite+aiosqlite:///./test.db"

    @property
    def min_evidence_photos(self) -> int:
        return 3 if self.MULTI_PHOTO_WORKFLOW else 1

settings = Settings()
