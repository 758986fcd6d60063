from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from typing import Optional

from app.crud.base import CRUDBase
from app.models.lecture import Lecture
from app.models.section import Section
from app.schemas.course import LectureCreate


class CRUDLecture(CRUDBase[Lecture, LectureCreate, dict]):

    def get_with_course(self, db: Session, id: int) -> Optional[Lecture]:
        return (
            db.query(Lecture)
            .options(joinedload(Lecture.section).joinedload(Section.course))
            .filter(Lecture.id == id)
            .first()
        )

    def get_for_section(self, db: Session, *, section_id: int, lecture_id: int) -> Optional[Lecture]:
        return (
            db.query(Lecture)
            .filter(Lecture.id == lecture_id, Lecture.section_id == section_id)
            .first()
        )

    def count_for_course(self, db: Session, *, course_id: int) -> int:
        return (
            db.query(func.count(Lecture.id))
            .join(Section, Section.id == Lecture.section_id)
            .filter(Section.course_id == course_id)
            .scalar()
        )

    def next_position(self, db: Session, *, section_id: int) -> int:
        last = db.query(func.max(Lecture.position)).filter(Lecture.section_id == section_id).scalar()
        return 0 if last is None else last + 1

    def close_gap(self, db: Session, *, section_id: int, position: int) -> None:
        following = (
            db.query(Lecture)
            .filter(Lecture.section_id == section_id, Lecture.position > position)
            .all()
        )
        for lecture in following:
            lecture.position -= 1
            db.add(lecture)


lecture = CRUDLecture(Lecture)
