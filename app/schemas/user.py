from pydantic import BaseModel, EmailStr, field_validator, ConfigDict
from typing import Optional
from datetime import datetime

from app.core.constants import UserRoleEnum

class UserBase(BaseModel):
    """Base user schema with common fields."""
    full_name: str
    email: EmailStr

class UserCreate(UserBase):
    """Schema for self-registration, includes password."""
    password: str

    @field_validator("password")
    def validate_password(cls, v):
        if not v or not v.strip():
            raise ValueError("Password cannot be empty or contain only whitespace.")
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters long.")
        return v

    @field_validator("full_name")
    def not_empty(cls, v):
        if not v.strip():
            raise ValueError("Full name cannot be empty")
        return v

class User(UserBase):
    """Main user schema for reading user data."""
    id: int
    role: UserRoleEnum
    organization_id: Optional[int] = None
    job_title: Optional[str] = None
    staff_id: Optional[str] = None
    is_active: bool
    model_config = ConfigDict(from_attributes=True)

class LearnerInvite(BaseModel):
    """Schema for a corporate admin inviting a learner into an organization."""
    full_name: str
    email: EmailStr
    job_title: Optional[str] = None
    staff_id: Optional[str] = None

    @field_validator("full_name")
    def min_length(cls, v):
        if len(v.strip()) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

class LearnerSummary(User):
    enrollment_count: int = 0
    created_at: Optional[datetime] = None

class LearnerInviteResult(BaseModel):
    user: User
    temporary_password: Optional[str] = None
