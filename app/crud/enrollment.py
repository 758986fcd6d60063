from sqlalchemy.orm import Session, selectinload
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.enrollment import Enrollment
from app.schemas.enrollment import EnrollmentCreate


class CRUDEnrollment(CRUDBase[Enrollment, EnrollmentCreate, dict]):

    def get_by_user_and_course(self, db: Session, user_id: int, course_id: int) -> Optional[Enrollment]:
        return (
            db.query(Enrollment)
            .filter(Enrollment.user_id == user_id)
            .filter(Enrollment.course_id == course_id)
            .first()
        )

    def get_by_user(self, db: Session, user_id: int, skip: int = 0, limit: int = 100) -> List[Enrollment]:
        return (
            db.query(Enrollment)
            .options(selectinload(Enrollment.course))
            .filter(Enrollment.user_id == user_id)
            .order_by(Enrollment.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_course(self, db: Session, course_id: int) -> List[Enrollment]:
        return db.query(Enrollment).filter(Enrollment.course_id == course_id).order_by(Enrollment.id).all()

    def get_by_learners_and_courses(self, db: Session, pairs: List[tuple]) -> List[Enrollment]:
        if not pairs:
            return []
        user_ids = {user_id for user_id, _ in pairs}
        course_ids = {course_id for _, course_id in pairs}
        rows = (
            db.query(Enrollment)
            .filter(Enrollment.user_id.in_(user_ids))
            .filter(Enrollment.course_id.in_(course_ids))
            .all()
        )
        wanted = set(pairs)
        return [row for row in rows if (row.user_id, row.course_id) in wanted]

    def get_completed_by_user(self, db: Session, user_id: int) -> List[Enrollment]:
        return (
            db.query(Enrollment)
            .filter(Enrollment.user_id == user_id)
            .filter(Enrollment.completed_at.isnot(None))
            .all()
        )


enrollment = CRUDEnrollment(Enrollment)
