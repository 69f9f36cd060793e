from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional
from app.models.user import UserRole

class Criterion(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    weight: float = Field(..., gt=0, le=100)

class CriteriaSetUpsert(BaseModel):
    criteria: List[Criterion] = Field(..., min_length=1)

    @field_validator("criteria")
    @classmethod
    def titles_unique(cls, value: List[Criterion]) -> List[Criterion]:
        titles = [c.title.strip().lower() for c in value]
        if len(titles) != len(set(titles)):
            raise ValueError("Criterion titles must be unique within a set")
        return value

class CriteriaSetResponse(BaseModel):
    id: int
    role: UserRole
    criteria: List[Criterion]
    total_weight: float
    weights_balanced: bool  # False → weights don't add up to 100; used as proportions
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_model(cls, criteria_set) -> "CriteriaSetResponse":
        criteria = [Criterion(**c) for c in criteria_set.criteria]
        total = sum(c.weight for c in criteria)
        return cls(
            id=criteria_set.id,
            role=criteria_set.role,
            criteria=criteria,
            total_weight=total,
            weights_balanced=total == 100,
            created_at=criteria_set.created_at,
            updated_at=criteria_set.updated_at,
        )
