from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.core.constants import AssignmentStatusEnum
from app.utils.dates import to_naive_utc


class AssignmentBase(BaseModel):
    course_id: int
    deadline: Optional[datetime] = None
    organization_id: Optional[int] = None

    @field_validator("deadline")
    def normalize_deadline(cls, v):
        return to_naive_utc(v)


class CourseAssignmentCreate(AssignmentBase):
    learner_id: int
    notes: Optional[str] = None


class BulkAssignmentCreate(AssignmentBase):
    learner_ids: List[int] = Field(..., min_length=1)


class CourseAssignment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    learner_id: int
    course_id: int
    organization_id: int
    assigned_by_id: int
    status: AssignmentStatusEnum
    deadline: Optional[datetime] = None
    notes: Optional[str] = None
    assigned_at: Optional[datetime] = None


class AssignmentView(CourseAssignment):
    """An assignment as shown to readers: stored status plus the derived one."""
    effective_status: AssignmentStatusEnum
    progress: int = 0
    completed_at: Optional[datetime] = None
    learner_name: Optional[str] = None
    course_title: Optional[str] = None
    cpd_points: int = 0


class BulkAssignmentFailure(BaseModel):
    learner_id: int
    reason: str


class BulkAssignmentResult(BaseModel):
    successful: int
    failed: int
    failures: List[BulkAssignmentFailure] = []


class AssignmentStatusSummary(BaseModel):
    all: int = 0
    assigned: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0
