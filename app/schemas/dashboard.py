from pydantic import BaseModel
from datetime import datetime
from typing import Dict, List, Optional
from .user import UserResponse

class ActivityItem(BaseModel):
    type: str
    message: str
    timestamp: Optional[datetime]

class DashboardSummary(BaseModel):
    month: str
    total_users: int
    users_to_rate: List[UserResponse]
    pending_reviews: int
    average_rating: Optional[int]  # None for admins and unrated users
    recent_activity: List[ActivityItem]

class TrendRecordResponse(BaseModel):
    month: str
    user_id: str
    name: str
    score: float

    model_config = {"from_attributes": True}

class LowPerformerResponse(BaseModel):
    uid: str
    name: str
    role: str
    average_score: float

    model_config = {"from_attributes": True}

class PerformanceResponse(BaseModel):
    months: List[str]
    threshold: float
    records: List[TrendRecordResponse]
    overall_averages: Dict[str, float]
    low_performers: List[LowPerformerResponse]
