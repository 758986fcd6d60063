from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.utils import deps
from app.models.user import User
from app.schemas.enrollment import Enrollment
from app.schemas.lecture_progress import LectureProgress, LectureProgressResult, LectureProgressUpdate
from app.services.progress import progress_service
from app.core.cache_config import CACHE_TTL
from app.core.decorators import cache_endpoint
from app.core.cache import cache

router = APIRouter()


@router.post("/lectures/{lecture_id}/progress", response_model=APIResponse[LectureProgressResult])
async def record_lecture_progress(
    *,
    db: Session = Depends(deps.get_transactional_db),
    lecture_id: int,
    progress_in: LectureProgressUpdate,
    current_user: User = Depends(deps.get_current_user)
):
    lecture_progress, enrollment = progress_service.record_lecture_progress(
        db, lecture_id=lecture_id, progress_in=progress_in, current_user=current_user
    )
    await cache.invalidate_user_cache(current_user.id)
    return APIResponse(
        message="Progress recorded successfully",
        data=LectureProgressResult(
            progress=LectureProgress.model_validate(lecture_progress),
            course_progress=enrollment.progress,
            completed_at=enrollment.completed_at,
        )
    )


@router.get("/courses/{course_id}/progress", response_model=APIResponse[Enrollment])
@cache_endpoint(ttl=CACHE_TTL["course_progress"], key_prefix="course_progress")
async def get_course_progress(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    enrollment = progress_service.get_course_progress(db, course_id=course_id, current_user=current_user)
    return APIResponse(message="Course progress retrieved successfully", data=Enrollment.model_validate(enrollment))


@router.get("/courses/{course_id}/lecture-progress", response_model=APIResponse[List[LectureProgress]])
@cache_endpoint(ttl=CACHE_TTL["lecture_progress"], key_prefix="lecture_progress")
async def get_lecture_progress(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    records = progress_service.get_lecture_progress(db, course_id=course_id, current_user=current_user)
    return APIResponse(
        message="Lecture progress retrieved successfully",
        data=[LectureProgress.model_validate(r) for r in records]
    )
