from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Literal

from app.services.task_lifecycle import task_state
from app.utils.photos import decode_photos

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    xp: int = Field(50, ge=0)
    location: Optional[str] = Field(None, max_length=200)
    assigned_to: Optional[int] = None

class TaskComplete(BaseModel):
    photo_urls: List[str] = Field(default_factory=list)

class TaskReview(BaseModel):
    decision: Literal["approved", "rejected"]

class TaskResponse(BaseModel):
    id: int
    team_id: int
    created_by: Optional[int]
    title: str
    description: Optional[str]
    xp: int
    location: Optional[str]
    assigned_to: Optional[int]
    completed: bool
    completed_by: Optional[int]
    approval_status: str
    photo_urls: List[str]
    reserved_by: Optional[int]
    reserved_at: Optional[datetime]
    created_at: Optional[datetime]
    completed_at: Optional[datetime]
    state: str

    @classmethod
    def from_task(cls, task) -> "TaskResponse":
        return cls(
            id=task.id,
            team_id=task.team_id,
            created_by=task.created_by,
            title=task.title,
            description=task.description,
            xp=task.xp,
            location=task.location,
            assigned_to=task.assigned_to,
            completed=task.completed,
            completed_by=task.completed_by,
            approval_status=task.approval_status,
            photo_urls=decode_photos(task.photo_url),
            reserved_by=task.reserved_by,
            reserved_at=task.reserved_at,
            created_at=task.created_at,
            completed_at=task.completed_at,
            state=task_state(task),
        )
