from pydantic import BaseModel, Field
from datetime import datetime
from typing import Annotated, Dict, Optional
from app.models.user import UserRole

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

Score = Annotated[int, Field(ge=1, le=10)]

class RatingCreate(BaseModel):
    given_to: str
    month: str = Field(..., pattern=MONTH_PATTERN)
    scores: Dict[str, Score]  # criterion title -> 1..10
    remarks: str = ""

class RatingUpdate(BaseModel):
    scores: Optional[Dict[str, Score]] = None
    remarks: Optional[str] = None

class RatingResponse(BaseModel):
    id: int
    given_by: str
    given_to: str
    month: str
    criteria: Dict[str, int]
    average_score: int
    remarks: str
    role_of_given_to: UserRole
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}

class RatingCheckResponse(BaseModel):
    given_to: str
    month: str
    exists: bool

class MonthlyAverageResponse(BaseModel):
    user_id: str
    months: Dict[str, float]  # YYYY-MM -> combined score, most recent first
