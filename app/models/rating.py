# app/models/rating.py
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Index, func
from app.database import Base

class Rating(Base):
    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True, index=True)
    # Plain uids: ratings outlive the users they reference
    given_by = Column(String(64), nullable=False, index=True)
    given_to = Column(String(64), nullable=False, index=True)
    month = Column(String(7), nullable=False, index=True)  # YYYY-MM

    criteria = Column(JSON, nullable=False, default=dict)  # title -> score 1..10
    average_score = Column(Integer, nullable=False, default=0)
    remarks = Column(Text, nullable=False, default="")
    role_of_given_to = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("ix_ratings_rater_ratee_month", "given_by", "given_to", "month"),
    )
