from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, func
from app.database import Base


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    photo_url = Column(Text, nullable=True)  # object path in the chat-photos bucket
    created_at = Column(DateTime(timezone=True), server_default=func.now())
