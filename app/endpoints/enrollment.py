from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.cache import cache
from app.core.cache_config import CACHE_TTL
from app.core.decorators import cache_endpoint
from app.models.user import User
from app.schemas.enrollment import Enrollment, EnrollmentCreate
from app.schemas.response import APIResponse
from app.services.enrollment import enrollment_service
from app.utils import deps

router = APIRouter()


@router.post("", response_model=APIResponse[Enrollment], status_code=status.HTTP_201_CREATED)
async def enroll_in_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    enrollment_in: EnrollmentCreate,
    current_user: User = Depends(deps.get_current_user)
):
    enrollment = enrollment_service.enroll(db, course_id=enrollment_in.course_id, current_user=current_user)
    await cache.invalidate_user_cache(current_user.id)
    return APIResponse(message="Enrolled successfully", data=Enrollment.model_validate(enrollment))


@router.get("/me", response_model=APIResponse[List[Enrollment]])
@cache_endpoint(ttl=CACHE_TTL["my_enrollments"], key_prefix="my_enrollments")
async def get_my_enrollments(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    enrollments = enrollment_service.get_user_enrollments(db, current_user=current_user)
    return APIResponse(
        message="Enrollments retrieved successfully",
        data=[Enrollment.model_validate(e) for e in enrollments]
    )
