from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

class MessageCreate(BaseModel):
    content: Optional[str] = Field(None, max_length=2000)
    photo_path: Optional[str] = Field(None, max_length=500)  # path in the chat-photos bucket

class MessageResponse(BaseModel):
    id: int
    team_id: int
    user_id: int
    author_name: str
    content: str
    photo_url: Optional[str]  # signed, short-lived
    created_at: Optional[datetime]

class UploadResponse(BaseModel):
    bucket: str
    path: str
    url: str
