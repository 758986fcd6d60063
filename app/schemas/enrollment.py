from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class EnrollmentCreate(BaseModel):
    course_id: int


class Enrollment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    course_id: int
    progress: int
    completed_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None
    deadline: Optional[datetime] = None
    assigned_by_id: Optional[int] = None
    assigned_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
