from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime
from app.models.user import UserRole

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: UserRole
    managers: List[str] = []  # project manager uids
    team_leads: List[str] = []  # team lead uids
    password: Optional[str] = Field(None, min_length=8, max_length=72)  # default temporary password if omitted

class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    managers: Optional[List[str]] = None
    team_leads: Optional[List[str]] = None

class UserResponse(BaseModel):
    uid: str
    name: str
    email: EmailStr
    role: UserRole
    managers: List[str] = []
    team_leads: List[str] = []
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class UserImportResponse(BaseModel):
    success: int
    errors: List[str]

class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str
    user: UserResponse
