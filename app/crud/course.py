from sqlalchemy.orm import Session, selectinload
from typing import List, Optional

from app.core.constants import CourseStatusEnum
from app.crud.base import CRUDBase
from app.models.course import Course
from app.models.section import Section
from app.schemas.course import CourseCreate, CourseUpdate


class CRUDCourse(CRUDBase[Course, CourseCreate, CourseUpdate]):

    def _query_with_curriculum(self, db: Session):
        return db.query(Course).options(
            selectinload(Course.instructor),
            selectinload(Course.sections).selectinload(Section.lectures)
        )

    def get(self, db: Session, id: int) -> Optional[Course]:
        return self._query_with_curriculum(db).filter(Course.id == id).first()

    def get_by_slug(self, db: Session, *, slug: str) -> Optional[Course]:
        return db.query(Course).filter(Course.slug == slug).first()

    def get_published(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[Course]:
        return (
            self._query_with_curriculum(db)
            .filter(Course.status == CourseStatusEnum.PUBLISHED)
            .order_by(Course.created_at.desc(), Course.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_instructor(self, db: Session, *, instructor_id: int) -> List[Course]:
        return (
            self._query_with_curriculum(db)
            .filter(Course.instructor_id == instructor_id)
            .order_by(Course.id)
            .all()
        )


course = CRUDCourse(Course)
