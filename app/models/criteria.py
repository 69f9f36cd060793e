# app/models/criteria.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, func
from app.database import Base

class CriteriaSet(Base):
    __tablename__ = "criteria_sets"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(String, unique=True, index=True, nullable=False)
    criteria = Column(JSON, nullable=False, default=list)  # [{"title": str, "weight": float}, ...]
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
