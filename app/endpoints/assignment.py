from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.cache import cache
from app.core.constants import AssignmentSortEnum, AssignmentStatusEnum, UserRoleEnum
from app.models.user import User
from app.schemas.course_assignment import (
    AssignmentStatusSummary,
    AssignmentView,
    BulkAssignmentCreate,
    BulkAssignmentResult,
    CourseAssignment,
    CourseAssignmentCreate,
)
from app.schemas.response import APIResponse
from app.services.assignment import assignment_service
from app.utils import deps

router = APIRouter()

require_assigner = deps.require_roles(UserRoleEnum.CORPORATE_ADMIN, UserRoleEnum.SUPER_ADMIN)


@router.post("", response_model=APIResponse[CourseAssignment], status_code=status.HTTP_201_CREATED)
async def assign_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    assignment_in: CourseAssignmentCreate,
    current_user: User = Depends(require_assigner)
):
    assignment = assignment_service.assign_course(db, assignment_in=assignment_in, current_user=current_user)
    await cache.invalidate_user_cache(assignment.learner_id)
    return APIResponse(message="Course assigned successfully", data=CourseAssignment.model_validate(assignment))


@router.post("/bulk", response_model=APIResponse[BulkAssignmentResult])
async def bulk_assign_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    bulk_in: BulkAssignmentCreate,
    current_user: User = Depends(require_assigner)
):
    result = assignment_service.bulk_assign(db, bulk_in=bulk_in, current_user=current_user)
    for learner_id in set(bulk_in.learner_ids):
        await cache.invalidate_user_cache(learner_id)
    return APIResponse(
        message=f"Assigned to {result.successful} learners, {result.failed} failed",
        data=result
    )


@router.get("/summary", response_model=APIResponse[AssignmentStatusSummary])
def get_assignment_summary(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    summary = assignment_service.get_status_summary(db, current_user=current_user)
    return APIResponse(message="Assignment summary retrieved successfully", data=summary)


@router.get("", response_model=APIResponse[List[AssignmentView]])
def list_assignments(
    *,
    db: Session = Depends(deps.get_db),
    status_filter: Optional[AssignmentStatusEnum] = Query(default=None, alias="status"),
    sort: AssignmentSortEnum = AssignmentSortEnum.ASSIGNED_AT,
    current_user: User = Depends(deps.get_current_user)
):
    """Assignments visible to the caller, with OVERDUE derived against the current time."""
    views = assignment_service.list_assignments(db, current_user=current_user, status_filter=status_filter, sort=sort)
    return APIResponse(message="Assignments retrieved successfully", data=views)
