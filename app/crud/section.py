from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Optional

from app.crud.base import CRUDBase
from app.models.section import Section
from app.schemas.course import SectionCreate


class CRUDSection(CRUDBase[Section, SectionCreate, dict]):

    def get_for_course(self, db: Session, *, course_id: int, section_id: int) -> Optional[Section]:
        return (
            db.query(Section)
            .filter(Section.id == section_id, Section.course_id == course_id)
            .first()
        )

    def next_position(self, db: Session, *, course_id: int) -> int:
        last = db.query(func.max(Section.position)).filter(Section.course_id == course_id).scalar()
        return 0 if last is None else last + 1

    def close_gap(self, db: Session, *, course_id: int, position: int) -> None:
        following = (
            db.query(Section)
            .filter(Section.course_id == course_id, Section.position > position)
            .all()
        )
        for section in following:
            section.position -= 1
            db.add(section)


section = CRUDSection(Section)
