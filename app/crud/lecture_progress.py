from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.lecture import Lecture
from app.models.lecture_progress import LectureProgress
from app.models.section import Section
from app.schemas.lecture_progress import LectureProgressUpdate


class CRUDLectureProgress(CRUDBase[LectureProgress, dict, LectureProgressUpdate]):

    def get_by_user_and_lecture(self, db: Session, user_id: int, lecture_id: int) -> Optional[LectureProgress]:
        return (
            db.query(LectureProgress)
            .filter(LectureProgress.user_id == user_id)
            .filter(LectureProgress.lecture_id == lecture_id)
            .first()
        )

    def _query_for_course(self, db: Session, user_id: int, course_id: int):
        return (
            db.query(LectureProgress)
            .join(Lecture, Lecture.id == LectureProgress.lecture_id)
            .join(Section, Section.id == Lecture.section_id)
            .filter(LectureProgress.user_id == user_id)
            .filter(Section.course_id == course_id)
        )

    def get_all_for_course(self, db: Session, user_id: int, course_id: int) -> List[LectureProgress]:
        return (
            self._query_for_course(db, user_id, course_id)
            .order_by(Section.position, Lecture.position)
            .all()
        )

    def count_completed_for_course(self, db: Session, user_id: int, course_id: int) -> int:
        return (
            self._query_for_course(db, user_id, course_id)
            .filter(LectureProgress.is_completed.is_(True))
            .with_entities(func.count(LectureProgress.id))
            .scalar()
        )


lecture_progress = CRUDLectureProgress(LectureProgress)
