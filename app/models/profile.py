from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from app.database import Base

EMPLOYER = "employer"
EMPLOYEE = "employee"
GLOBAL_ROLES = (EMPLOYER, EMPLOYEE)

class Profile(Base):
    __tablename__ = "profiles"

    # Same id as the owning account
    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    full_name = Column(String, nullable=False)
    role = Column(String, nullable=False, default=EMPLOYEE)  # "employer" or "employee"
    created_at = Column(DateTime(timezone=True), server_default=func.now())
