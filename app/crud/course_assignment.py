from sqlalchemy.orm import Session, selectinload
from typing import List, Optional

from app.core.constants import AssignmentSortEnum
from app.crud.base import CRUDBase
from app.models.course_assignment import CourseAssignment
from app.schemas.course_assignment import CourseAssignmentCreate


class CRUDCourseAssignment(CRUDBase[CourseAssignment, CourseAssignmentCreate, dict]):

    def _query_with_relationships(self, db: Session):
        return db.query(CourseAssignment).options(
            selectinload(CourseAssignment.learner),
            selectinload(CourseAssignment.course),
        )

    def _ordered(self, query, sort: AssignmentSortEnum):
        if sort == AssignmentSortEnum.DEADLINE:
            # Assignments without a deadline go last
            return query.order_by(CourseAssignment.deadline.is_(None), CourseAssignment.deadline.asc())
        return query.order_by(CourseAssignment.assigned_at.desc(), CourseAssignment.id.desc())

    def get_by_learner_and_course(self, db: Session, learner_id: int, course_id: int) -> Optional[CourseAssignment]:
        return (
            db.query(CourseAssignment)
            .filter(CourseAssignment.learner_id == learner_id)
            .filter(CourseAssignment.course_id == course_id)
            .first()
        )

    def get_by_learner(self, db: Session, learner_id: int, sort: AssignmentSortEnum = AssignmentSortEnum.ASSIGNED_AT) -> List[CourseAssignment]:
        query = self._query_with_relationships(db).filter(CourseAssignment.learner_id == learner_id)
        return self._ordered(query, sort).all()

    def get_by_organization(self, db: Session, organization_id: int, sort: AssignmentSortEnum = AssignmentSortEnum.ASSIGNED_AT) -> List[CourseAssignment]:
        query = self._query_with_relationships(db).filter(CourseAssignment.organization_id == organization_id)
        return self._ordered(query, sort).all()

    def get_recent(self, db: Session, limit: int = 100, sort: AssignmentSortEnum = AssignmentSortEnum.ASSIGNED_AT) -> List[CourseAssignment]:
        return self._ordered(self._query_with_relationships(db), sort).limit(limit).all()


course_assignment = CRUDCourseAssignment(CourseAssignment)
