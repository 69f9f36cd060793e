# app/models/user.py
import enum
from sqlalchemy import Column, String, DateTime, JSON, func
from app.database import Base


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    PROJECT_MANAGER = "project_manager"
    TEAM_LEAD = "team_lead"
    DEVELOPER = "developer"


class User(Base):
    __tablename__ = "users"

    uid = Column(String(64), primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=UserRole.DEVELOPER.value)

    # uids of the user's project managers / team leads (not foreign keys)
    managers = Column(JSON, nullable=False, default=list)
    team_leads = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
