from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.core.cache import cache
from app.core.cache_config import CACHE_TTL
from app.core.constants import UserRoleEnum
from app.core.decorators import cache_endpoint
from app.models.user import User
from app.schemas.course import (
    Course, CourseCreate, CourseSummary, CourseUpdate, Lecture, LectureCreate, LectureUpdate, ReorderRequest,
    Section, SectionCreate, SectionUpdate,
)
from app.schemas.response import APIResponse
from app.services.course import course_service
from app.utils import deps

router = APIRouter()

require_author = deps.require_roles(UserRoleEnum.INSTRUCTOR, UserRoleEnum.SUPER_ADMIN)


@router.post("", response_model=APIResponse[Course], status_code=status.HTTP_201_CREATED)
async def create_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_in: CourseCreate,
    current_user: User = Depends(require_author)
):
    course = course_service.create_course(db, course_in=course_in, current_user=current_user)
    await cache.delete_pattern("*course_list*")
    return APIResponse(message="Course created successfully", data=Course.model_validate(course))


@router.get("", response_model=APIResponse[List[CourseSummary]])
@cache_endpoint(ttl=CACHE_TTL["course_list"], key_prefix="course_list")
async def list_courses(
    *,
    db: Session = Depends(deps.get_db),
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(deps.get_current_user)
):
    courses = course_service.list_published(db, skip=skip, limit=limit)
    return APIResponse(message="Courses retrieved successfully", data=[CourseSummary.model_validate(c) for c in courses])


@router.get("/mine", response_model=APIResponse[List[CourseSummary]])
def list_my_courses(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(require_author)
):
    courses = course_service.list_own(db, current_user=current_user)
    return APIResponse(message="Courses retrieved successfully", data=[CourseSummary.model_validate(c) for c in courses])


@router.get("/{course_id}", response_model=APIResponse[Course])
def get_course(
    *,
    db: Session = Depends(deps.get_db),
    course_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    course = course_service.get_course(db, course_id=course_id, current_user=current_user)
    return APIResponse(message="Course retrieved successfully", data=Course.model_validate(course))


@router.put("/{course_id}", response_model=APIResponse[Course])
async def update_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    course_in: CourseUpdate,
    current_user: User = Depends(require_author)
):
    course = course_service.update_course(db, course_id=course_id, course_in=course_in, current_user=current_user)
    await cache.delete_pattern("*course_list*")
    return APIResponse(message="Course updated successfully", data=Course.model_validate(course))


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    current_user: User = Depends(require_author)
):
    course_service.delete_course(db, course_id=course_id, current_user=current_user)
    await cache.delete_pattern("*course_list*")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{course_id}/sections", response_model=APIResponse[Section], status_code=status.HTTP_201_CREATED)
def add_section(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    section_in: SectionCreate,
    current_user: User = Depends(require_author)
):
    section = course_service.add_section(db, course_id=course_id, section_in=section_in, current_user=current_user)
    return APIResponse(message="Section created successfully", data=Section.model_validate(section))


@router.post(
    "/{course_id}/sections/{section_id}/lectures",
    response_model=APIResponse[Lecture],
    status_code=status.HTTP_201_CREATED
)
async def add_lecture(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    section_id: int,
    lecture_in: LectureCreate,
    current_user: User = Depends(require_author)
):
    lecture = course_service.add_lecture(
        db, course_id=course_id, section_id=section_id, lecture_in=lecture_in, current_user=current_user
    )
    # Every enrolled learner's percent just changed
    await cache.clear()
    return APIResponse(message="Lecture created successfully", data=Lecture.model_validate(lecture))


@router.delete("/{course_id}/sections/{section_id}/lectures/{lecture_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lecture(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    section_id: int,
    lecture_id: int,
    current_user: User = Depends(require_author)
):
    course_service.delete_lecture(
        db, course_id=course_id, section_id=section_id, lecture_id=lecture_id, current_user=current_user
    )
    await cache.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{course_id}/sections/reorder", response_model=APIResponse[Course])
def reorder_sections(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    reorder_in: ReorderRequest,
    current_user: User = Depends(require_author)
):
    course = course_service.reorder_sections(db, course_id=course_id, reorder_in=reorder_in, current_user=current_user)
    return APIResponse(message="Sections reordered successfully", data=Course.model_validate(course))


@router.put("/{course_id}/sections/{section_id}", response_model=APIResponse[Section])
def update_section(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    section_id: int,
    section_in: SectionUpdate,
    current_user: User = Depends(require_author)
):
    section = course_service.update_section(
        db, course_id=course_id, section_id=section_id, section_in=section_in, current_user=current_user
    )
    return APIResponse(message="Section updated successfully", data=Section.model_validate(section))


@router.delete("/{course_id}/sections/{section_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_section(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    section_id: int,
    current_user: User = Depends(require_author)
):
    course_service.delete_section(db, course_id=course_id, section_id=section_id, current_user=current_user)
    await cache.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{course_id}/sections/{section_id}/lectures/reorder", response_model=APIResponse[Section])
def reorder_lectures(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    section_id: int,
    reorder_in: ReorderRequest,
    current_user: User = Depends(require_author)
):
    section = course_service.reorder_lectures(
        db, course_id=course_id, section_id=section_id, reorder_in=reorder_in, current_user=current_user
    )
    return APIResponse(message="Lectures reordered successfully", data=Section.model_validate(section))


@router.put("/{course_id}/sections/{section_id}/lectures/{lecture_id}", response_model=APIResponse[Lecture])
def update_lecture(
    *,
    db: Session = Depends(deps.get_transactional_db),
    course_id: int,
    section_id: int,
    lecture_id: int,
    lecture_in: LectureUpdate,
    current_user: User = Depends(require_author)
):
    lecture = course_service.update_lecture(
        db, course_id=course_id, section_id=section_id, lecture_id=lecture_id,
        lecture_in=lecture_in, current_user=current_user
    )
    return APIResponse(message="Lecture updated successfully", data=Lecture.model_validate(lecture))
