import logging
import time
from typing import List

from fastapi import HTTPException, status
from slugify import slugify
from sqlalchemy.orm import Session

from app.core.constants import CourseStatusEnum
from app.crud.course import course as crud_course
from app.crud.lecture import lecture as crud_lecture
from app.crud.section import section as crud_section
from app.models.course import Course
from app.models.lecture import Lecture
from app.models.section import Section
from app.models.user import User
from app.schemas.course import (
    CourseCreate, CourseUpdate, LectureCreate, LectureUpdate, ReorderRequest, SectionCreate, SectionUpdate,
)
from app.services.progress import progress_service
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class CourseService:

    def _unique_slug(self, db: Session, title: str) -> str:
        slug = slugify(title) or "course"
        if crud_course.get_by_slug(db, slug=slug):
            slug = f"{slug}-{int(time.time() * 1000)}"
        return slug

    def _get_managed_course(self, db: Session, course_id: int, current_user: User) -> Course:
        course = crud_course.get(db, id=course_id)
        if not course:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
        permission_helper.require_course_management_permission(current_user, course)
        return course

    def create_course(self, db: Session, course_in: CourseCreate, current_user: User) -> Course:
        course = crud_course.create(
            db,
            obj_in={
                **course_in.model_dump(),
                "slug": self._unique_slug(db, course_in.title),
                "instructor_id": current_user.id,
            },
        )
        logger.info(f"Course {course.id} '{course.title}' created by user {current_user.id}")
        return crud_course.get(db, id=course.id)

    def update_course(self, db: Session, course_id: int, course_in: CourseUpdate, current_user: User) -> Course:
        course = self._get_managed_course(db, course_id, current_user)
        crud_course.update(db, db_obj=course, obj_in=course_in)
        return crud_course.get(db, id=course_id)

    def get_course(self, db: Session, course_id: int, current_user: User) -> Course:
        course = crud_course.get(db, id=course_id)
        if not course:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
        if course.status != CourseStatusEnum.PUBLISHED and not permission_helper.can_manage_course(current_user, course):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
        return course

    def list_published(self, db: Session, skip: int = 0, limit: int = 100) -> List[Course]:
        return crud_course.get_published(db, skip=skip, limit=limit)

    def list_own(self, db: Session, current_user: User) -> List[Course]:
        return crud_course.get_by_instructor(db, instructor_id=current_user.id)

    def add_section(self, db: Session, course_id: int, section_in: SectionCreate, current_user: User) -> Section:
        self._get_managed_course(db, course_id, current_user)
        return crud_section.create(
            db,
            obj_in={
                **section_in.model_dump(),
                "course_id": course_id,
                "position": crud_section.next_position(db, course_id=course_id),
            },
        )

    def add_lecture(
        self, db: Session, course_id: int, section_id: int, lecture_in: LectureCreate, current_user: User
    ) -> Lecture:
        self._get_managed_course(db, course_id, current_user)
        self._get_section_or_raise(db, course_id, section_id)

        lecture = crud_lecture.create(
            db,
            obj_in={
                **lecture_in.model_dump(),
                "section_id": section_id,
                "position": crud_lecture.next_position(db, section_id=section_id),
            },
            commit=False,
        )
        # A new lecture lowers every existing learner's percent
        progress_service.recompute_all_for_course(db, course_id)
        db.commit()
        db.refresh(lecture)
        return lecture

    def _get_section_or_raise(self, db: Session, course_id: int, section_id: int) -> Section:
        section = crud_section.get_for_course(db, course_id=course_id, section_id=section_id)
        if not section:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")
        return section

    def _get_lecture_or_raise(self, db: Session, course_id: int, section_id: int, lecture_id: int) -> Lecture:
        self._get_section_or_raise(db, course_id, section_id)
        lecture = crud_lecture.get_for_section(db, section_id=section_id, lecture_id=lecture_id)
        if not lecture:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lecture not found")
        return lecture

    def _apply_order(self, items, ordered_ids: List[int], label: str) -> None:
        by_id = {item.id: item for item in items}
        if len(ordered_ids) != len(by_id) or set(ordered_ids) != set(by_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"ordered_ids must list every {label} exactly once"
            )
        for position, item_id in enumerate(ordered_ids):
            by_id[item_id].position = position

    def delete_course(self, db: Session, course_id: int, current_user: User) -> None:
        course = self._get_managed_course(db, course_id, current_user)
        if course.enrollments:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete a course with enrollments. Archive it instead."
            )
        crud_course.delete(db, id=course_id)
        logger.info(f"Course {course_id} deleted by user {current_user.id}")

    def update_section(
        self, db: Session, course_id: int, section_id: int, section_in: SectionUpdate, current_user: User
    ) -> Section:
        self._get_managed_course(db, course_id, current_user)
        section = self._get_section_or_raise(db, course_id, section_id)
        return crud_section.update(db, db_obj=section, obj_in=section_in)

    def delete_section(self, db: Session, course_id: int, section_id: int, current_user: User) -> None:
        self._get_managed_course(db, course_id, current_user)
        section = self._get_section_or_raise(db, course_id, section_id)
        position = section.position

        crud_section.delete(db, id=section_id, commit=False)
        crud_section.close_gap(db, course_id=course_id, position=position)
        # Its lectures went with it, so every learner's percent moves
        progress_service.recompute_all_for_course(db, course_id)
        db.commit()
        logger.info(f"Section {section_id} removed from course {course_id} by user {current_user.id}")

    def reorder_sections(self, db: Session, course_id: int, reorder_in: ReorderRequest, current_user: User) -> Course:
        course = self._get_managed_course(db, course_id, current_user)
        self._apply_order(course.sections, reorder_in.ordered_ids, "section")
        db.commit()
        return crud_course.get(db, id=course_id)

    def update_lecture(
        self, db: Session, course_id: int, section_id: int, lecture_id: int, lecture_in: LectureUpdate, current_user: User
    ) -> Lecture:
        self._get_managed_course(db, course_id, current_user)
        lecture = self._get_lecture_or_raise(db, course_id, section_id, lecture_id)
        return crud_lecture.update(db, db_obj=lecture, obj_in=lecture_in)

    def reorder_lectures(
        self, db: Session, course_id: int, section_id: int, reorder_in: ReorderRequest, current_user: User
    ) -> Section:
        self._get_managed_course(db, course_id, current_user)
        section = self._get_section_or_raise(db, course_id, section_id)
        self._apply_order(section.lectures, reorder_in.ordered_ids, "lecture")
        db.commit()
        return self._get_section_or_raise(db, course_id, section_id)

    def delete_lecture(self, db: Session, course_id: int, section_id: int, lecture_id: int, current_user: User) -> None:
        self._get_managed_course(db, course_id, current_user)
        lecture = self._get_lecture_or_raise(db, course_id, section_id, lecture_id)
        position = lecture.position

        crud_lecture.delete(db, id=lecture_id, commit=False)
        crud_lecture.close_gap(db, section_id=section_id, position=position)
        progress_service.recompute_all_for_course(db, course_id)
        db.commit()
        logger.info(f"Lecture {lecture_id} removed from course {course_id} by user {current_user.id}")


course_service = CourseService()
