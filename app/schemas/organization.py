from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from app.core.config import settings


class OrganizationBase(BaseModel):
    name: str
    contact_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    phone: Optional[str] = None
    max_learners: int = Field(default=settings.DEFAULT_MAX_LEARNERS, ge=1)
    billing_enabled: bool = False

    @field_validator("name")
    def min_length(cls, v):
        if len(v.strip()) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("contact_email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        return v or None


class OrganizationCreate(OrganizationBase):
    pass


class OrganizationUpdate(BaseModel):
    name: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    phone: Optional[str] = None
    max_learners: Optional[int] = Field(default=None, ge=1)
    billing_enabled: Optional[bool] = None

    @field_validator("name")
    def min_length(cls, v):
        if v is not None and len(v.strip()) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v

    @field_validator("contact_email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        return v or None


class Organization(OrganizationBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    created_at: Optional[datetime] = None
