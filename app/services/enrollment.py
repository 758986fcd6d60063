import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import CourseStatusEnum
from app.crud.course import course as crud_course
from app.crud.enrollment import enrollment as crud_enrollment
from app.models.enrollment import Enrollment
from app.models.user import User

logger = logging.getLogger(__name__)


class EnrollmentService:

    def enroll(self, db: Session, course_id: int, current_user: User) -> Enrollment:
        course = crud_course.get(db, id=course_id)
        if not course or course.status != CourseStatusEnum.PUBLISHED:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")

        if crud_enrollment.get_by_user_and_course(db, user_id=current_user.id, course_id=course_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already enrolled in this course")

        if not course.is_free and course.price and course.price > 0:
            raise HTTPException(
                status_code=status.HTTP_402_PAYMENT_REQUIRED,
                detail="This course requires payment"
            )

        try:
            enrollment = crud_enrollment.create(
                db, obj_in={"user_id": current_user.id, "course_id": course_id, "progress": 0}
            )
        except IntegrityError:
            db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already enrolled in this course")

        logger.info(f"User {current_user.id} enrolled in course {course_id}")
        return enrollment

    def get_user_enrollments(self, db: Session, current_user: User) -> List[Enrollment]:
        return crud_enrollment.get_by_user(db, user_id=current_user.id)


enrollment_service = EnrollmentService()
