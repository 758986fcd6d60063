import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.crud.certificate import certificate as crud_certificate
from app.crud.course import course as crud_course
from app.crud.enrollment import enrollment as crud_enrollment
from app.crud.lecture import lecture as crud_lecture
from app.crud.lecture_progress import lecture_progress as crud_lecture_progress
from app.models.enrollment import Enrollment
from app.models.lecture_progress import LectureProgress
from app.models.user import User
from app.schemas.lecture_progress import LectureProgressUpdate
from app.services.assignment import sync_assignment_status
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


def calculate_progress_percent(completed: int, total: int) -> int:
    """The one place course percent is computed. Half-up rounding, 0 for empty courses."""
    if total <= 0:
        return 0
    completed = min(max(completed, 0), total)
    percent = Decimal(100 * completed) / Decimal(total)
    return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def detect_completion(
    enrollment: Enrollment, percent: int, now: datetime, sticky: bool = True, has_certificate: bool = False
) -> bool:
    """Stamp completed_at the first time percent hits 100. Returns True on that transition.

    With sticky=False a later regression below 100 clears completed_at again,
    unless a certificate was already issued for the enrollment.
    """
    if percent >= 100:
        if enrollment.completed_at is None:
            enrollment.completed_at = now
            return True
        return False

    if not sticky and not has_certificate and enrollment.completed_at is not None:
        logger.info(
            f"Clearing completion for enrollment {enrollment.id}: progress regressed to {percent}%"
        )
        enrollment.completed_at = None
    return False


class ProgressService:

    def _get_or_raise_enrollment(self, db: Session, user_id: int, course_id: int, status_code: int = status.HTTP_404_NOT_FOUND) -> Enrollment:
        enrollment = crud_enrollment.get_by_user_and_course(db, user_id=user_id, course_id=course_id)
        if not enrollment:
            raise HTTPException(
                status_code=status_code,
                detail="You are not enrolled in this course."
            )
        return enrollment

    def _get_course_or_raise(self, db: Session, course_id: int):
        course = crud_course.get(db, id=course_id)
        if not course:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found.")
        return course

    def _upsert_lecture_progress(
        self, db: Session, user_id: int, lecture_id: int, progress_in: LectureProgressUpdate, now: datetime
    ) -> LectureProgress:
        lecture_progress = crud_lecture_progress.get_by_user_and_lecture(db, user_id=user_id, lecture_id=lecture_id)

        if lecture_progress is None:
            is_completed = bool(progress_in.is_completed)
            try:
                return crud_lecture_progress.create(
                    db,
                    obj_in={
                        "user_id": user_id,
                        "lecture_id": lecture_id,
                        "is_completed": is_completed,
                        "completed_at": now if is_completed else None,
                        "watched_duration": progress_in.watched_duration or 0,
                        "last_position": progress_in.last_position or 0,
                    },
                    commit=False,
                )
            except IntegrityError:
                # A concurrent heartbeat created the row first; fall through to update it.
                db.rollback()
                lecture_progress = crud_lecture_progress.get_by_user_and_lecture(db, user_id=user_id, lecture_id=lecture_id)
                if lecture_progress is None:
                    raise

        update_data = {}
        if progress_in.is_completed is not None:
            update_data["is_completed"] = progress_in.is_completed
            if not progress_in.is_completed:
                update_data["completed_at"] = None
            elif not lecture_progress.is_completed:
                update_data["completed_at"] = now
        if progress_in.watched_duration is not None:
            update_data["watched_duration"] = progress_in.watched_duration
        if progress_in.last_position is not None:
            update_data["last_position"] = progress_in.last_position

        return crud_lecture_progress.update(db, db_obj=lecture_progress, obj_in=update_data, commit=False)

    def recompute_course_progress(self, db: Session, enrollment: Enrollment, now: Optional[datetime] = None, touch: bool = True) -> int:
        now = now or utcnow()
        db.flush()

        total = crud_lecture.count_for_course(db, course_id=enrollment.course_id)
        completed = crud_lecture_progress.count_completed_for_course(
            db, user_id=enrollment.user_id, course_id=enrollment.course_id
        )
        percent = calculate_progress_percent(completed, total)

        enrollment.progress = percent
        if touch:
            enrollment.last_accessed_at = now

        sticky = settings.COMPLETION_IS_STICKY
        has_certificate = False
        if not sticky and percent < 100 and enrollment.completed_at is not None:
            has_certificate = crud_certificate.get_by_user_and_course(
                db, user_id=enrollment.user_id, course_id=enrollment.course_id
            ) is not None

        if detect_completion(enrollment, percent, now, sticky=sticky, has_certificate=has_certificate):
            logger.info(
                f"Enrollment {enrollment.id} completed: user {enrollment.user_id}, course {enrollment.course_id}"
            )

        db.add(enrollment)
        sync_assignment_status(db, enrollment)
        db.flush()
        return percent

    def recompute_all_for_course(self, db: Session, course_id: int) -> int:
        """Re-derive every enrollment of a course after its lecture set changed."""
        enrollments = crud_enrollment.get_by_course(db, course_id=course_id)
        now = utcnow()
        for enrollment in enrollments:
            self.recompute_course_progress(db, enrollment, now=now, touch=False)
        if enrollments:
            logger.info(f"Recomputed progress for {len(enrollments)} enrollments of course {course_id}")
        return len(enrollments)

    def record_lecture_progress(
        self, db: Session, lecture_id: int, progress_in: LectureProgressUpdate, current_user: User
    ) -> Tuple[LectureProgress, Enrollment]:
        lecture = crud_lecture.get_with_course(db, id=lecture_id)
        if not lecture:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lecture not found")

        course_id = lecture.section.course_id
        enrollment = self._get_or_raise_enrollment(
            db, current_user.id, course_id, status_code=status.HTTP_403_FORBIDDEN
        )

        now = utcnow()
        lecture_progress = self._upsert_lecture_progress(db, current_user.id, lecture_id, progress_in, now)
        self.recompute_course_progress(db, enrollment, now=now)

        db.commit()
        db.refresh(lecture_progress)
        db.refresh(enrollment)
        return lecture_progress, enrollment

    def get_course_progress(self, db: Session, course_id: int, current_user: User) -> Enrollment:
        self._get_course_or_raise(db, course_id)
        return self._get_or_raise_enrollment(db, current_user.id, course_id)

    def get_lecture_progress(self, db: Session, course_id: int, current_user: User) -> List[LectureProgress]:
        self._get_course_or_raise(db, course_id)
        self._get_or_raise_enrollment(db, current_user.id, course_id)
        return crud_lecture_progress.get_all_for_course(db, user_id=current_user.id, course_id=course_id)


progress_service = ProgressService()
