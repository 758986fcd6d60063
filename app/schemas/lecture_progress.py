from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class LectureProgressUpdate(BaseModel):
    """Playback heartbeat or explicit mark-complete; every field is optional."""
    is_completed: Optional[bool] = None
    watched_duration: Optional[int] = Field(default=None, ge=0)
    last_position: Optional[int] = Field(default=None, ge=0)


class LectureProgress(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    lecture_id: int
    is_completed: bool
    completed_at: Optional[datetime] = None
    watched_duration: int
    last_position: int
    updated_at: Optional[datetime] = None


class LectureProgressResult(BaseModel):
    progress: LectureProgress
    course_progress: int
    completed_at: Optional[datetime] = None
