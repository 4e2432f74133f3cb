from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, func
from app.database import Base

# approval_status values
APPROVAL_NONE = "none"
APPROVAL_PENDING = "pending"
APPROVAL_APPROVED = "approved"
APPROVAL_REJECTED = "rejected"

class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    xp = Column(Integer, nullable=False, default=0)                # reward amount
    location = Column(String, nullable=True)
    assigned_to = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)

    completed = Column(Boolean, nullable=False, default=False)
    completed_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    approval_status = Column(String, nullable=False, default=APPROVAL_NONE)  # none, pending, approved, rejected
    photo_url = Column(Text, nullable=True)   # single URL or JSON list of URLs

    reserved_by = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    reserved_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)
