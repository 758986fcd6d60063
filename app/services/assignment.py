import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.constants import AssignmentSortEnum, AssignmentStatusEnum, CourseStatusEnum
from app.crud.course import course as crud_course
from app.crud.course_assignment import course_assignment as crud_assignment
from app.crud.enrollment import enrollment as crud_enrollment
from app.crud.organization import organization as crud_organization
from app.crud.user import user as crud_user
from app.models.course_assignment import CourseAssignment
from app.models.enrollment import Enrollment
from app.models.user import User
from app.schemas.course_assignment import (
    AssignmentStatusSummary,
    AssignmentView,
    BulkAssignmentCreate,
    BulkAssignmentFailure,
    BulkAssignmentResult,
    CourseAssignmentCreate,
)
from app.utils.dates import to_naive_utc, utcnow
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


def progress_status(enrollment: Optional[Enrollment]) -> AssignmentStatusEnum:
    """Status implied by progress alone, ignoring deadlines."""
    if enrollment is None:
        return AssignmentStatusEnum.ASSIGNED
    if (enrollment.progress or 0) >= 100:
        return AssignmentStatusEnum.COMPLETED
    if (enrollment.progress or 0) > 0 or enrollment.last_accessed_at is not None:
        return AssignmentStatusEnum.IN_PROGRESS
    return AssignmentStatusEnum.ASSIGNED


def derive_assignment_status(
    assignment: CourseAssignment, enrollment: Optional[Enrollment], now: Optional[datetime] = None
) -> AssignmentStatusEnum:
    """Effective status at `now`. An unfinished assignment past its deadline reads as OVERDUE."""
    current = progress_status(enrollment)
    if current == AssignmentStatusEnum.COMPLETED:
        return current

    deadline = to_naive_utc(assignment.deadline)
    if deadline is not None and deadline < (now or utcnow()):
        return AssignmentStatusEnum.OVERDUE
    return current


def sync_assignment_status(db: Session, enrollment: Enrollment) -> Optional[CourseAssignment]:
    """Mirror the enrollment's progress-driven status onto its assignment, if there is one."""
    assignment = crud_assignment.get_by_learner_and_course(
        db, learner_id=enrollment.user_id, course_id=enrollment.course_id
    )
    if assignment is None:
        return None

    new_status = progress_status(enrollment)
    if assignment.status != new_status:
        logger.info(f"Assignment {assignment.id} status {assignment.status.value} -> {new_status.value}")
        assignment.status = new_status
        db.add(assignment)
    return assignment


class AssignmentService:

    def _get_assignable_course(self, db: Session, course_id: int):
        course = crud_course.get(db, id=course_id)
        if not course or course.status == CourseStatusEnum.ARCHIVED:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
        return course

    def _get_organization(self, db: Session, current_user: User, provided_organization_id: Optional[int]):
        organization_id = permission_helper.get_organization_id_for_operation(current_user, provided_organization_id)
        organization = crud_organization.get(db, id=organization_id)
        if not organization:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")
        if organization.billing_enabled:
            raise HTTPException(
                status_code=status.HTTP_501_NOT_IMPLEMENTED,
                detail="Seat billing for assigned courses is not available yet."
            )
        return organization

    def _assign_one(
        self,
        db: Session,
        *,
        organization_id: int,
        course_id: int,
        learner_id: int,
        deadline: Optional[datetime],
        notes: Optional[str],
        assigned_by: User,
    ) -> CourseAssignment:
        learner = crud_user.get(db, id=learner_id)
        if not learner:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Learner not found")
        if not permission_helper.belongs_to_organization(learner, organization_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Learner does not belong to this organization"
            )

        if crud_assignment.get_by_learner_and_course(db, learner_id=learner_id, course_id=course_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Course already assigned to this learner"
            )

        now = utcnow()
        assignment = crud_assignment.create(
            db,
            obj_in={
                "learner_id": learner_id,
                "course_id": course_id,
                "organization_id": organization_id,
                "assigned_by_id": assigned_by.id,
                "status": AssignmentStatusEnum.ASSIGNED,
                "deadline": deadline,
                "notes": notes,
                "assigned_at": now,
            },
            commit=False,
        )

        enrollment = crud_enrollment.get_by_user_and_course(db, user_id=learner_id, course_id=course_id)
        assignment_fields = {"assigned_by_id": assigned_by.id, "assigned_at": now, "deadline": deadline}
        if enrollment:
            enrollment = crud_enrollment.update(db, db_obj=enrollment, obj_in=assignment_fields, commit=False)
        else:
            enrollment = crud_enrollment.create(
                db,
                obj_in={"user_id": learner_id, "course_id": course_id, "progress": 0, **assignment_fields},
                commit=False,
            )

        # An existing enrollment may already carry progress
        sync_assignment_status(db, enrollment)
        db.flush()
        return assignment

    def assign_course(self, db: Session, assignment_in: CourseAssignmentCreate, current_user: User) -> CourseAssignment:
        organization = self._get_organization(db, current_user, assignment_in.organization_id)
        self._get_assignable_course(db, assignment_in.course_id)

        try:
            assignment = self._assign_one(
                db,
                organization_id=organization.id,
                course_id=assignment_in.course_id,
                learner_id=assignment_in.learner_id,
                deadline=assignment_in.deadline,
                notes=assignment_in.notes,
                assigned_by=current_user,
            )
            db.commit()
        except IntegrityError:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Course already assigned to this learner"
            )

        db.refresh(assignment)
        logger.info(
            f"User {current_user.id} assigned course {assignment.course_id} to learner {assignment.learner_id}"
        )
        return assignment

    def bulk_assign(self, db: Session, bulk_in: BulkAssignmentCreate, current_user: User) -> BulkAssignmentResult:
        organization = self._get_organization(db, current_user, bulk_in.organization_id)
        self._get_assignable_course(db, bulk_in.course_id)

        successful = 0
        failures: List[BulkAssignmentFailure] = []
        # Duplicated ids in one request are assigned once
        for learner_id in dict.fromkeys(bulk_in.learner_ids):
            try:
                self._assign_one(
                    db,
                    organization_id=organization.id,
                    course_id=bulk_in.course_id,
                    learner_id=learner_id,
                    deadline=bulk_in.deadline,
                    notes=None,
                    assigned_by=current_user,
                )
                db.commit()
                successful += 1
            except HTTPException as e:
                db.rollback()
                failures.append(BulkAssignmentFailure(learner_id=learner_id, reason=str(e.detail)))
            except IntegrityError:
                db.rollback()
                failures.append(
                    BulkAssignmentFailure(learner_id=learner_id, reason="Course already assigned to this learner")
                )

        logger.info(
            f"Bulk assignment of course {bulk_in.course_id} by user {current_user.id}: "
            f"{successful} successful, {len(failures)} failed"
        )
        return BulkAssignmentResult(successful=successful, failed=len(failures), failures=failures)

    def _scoped_assignments(self, db: Session, current_user: User, sort: AssignmentSortEnum) -> List[CourseAssignment]:
        if permission_helper.is_learner(current_user):
            return crud_assignment.get_by_learner(db, learner_id=current_user.id, sort=sort)
        if permission_helper.is_corporate_admin(current_user):
            if not current_user.organization_id:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No organization assigned")
            return crud_assignment.get_by_organization(db, organization_id=current_user.organization_id, sort=sort)
        if permission_helper.is_super_admin(current_user):
            return crud_assignment.get_recent(db, limit=100, sort=sort)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to view assignments."
        )

    def _build_views(self, db: Session, assignments: List[CourseAssignment], now: datetime) -> List[AssignmentView]:
        pairs = [(a.learner_id, a.course_id) for a in assignments]
        enrollments: Dict[Tuple[int, int], Enrollment] = {
            (e.user_id, e.course_id): e for e in crud_enrollment.get_by_learners_and_courses(db, pairs)
        }

        views = []
        for assignment in assignments:
            enrollment = enrollments.get((assignment.learner_id, assignment.course_id))
            views.append(
                AssignmentView(
                    id=assignment.id,
                    learner_id=assignment.learner_id,
                    course_id=assignment.course_id,
                    organization_id=assignment.organization_id,
                    assigned_by_id=assignment.assigned_by_id,
                    status=assignment.status,
                    deadline=assignment.deadline,
                    notes=assignment.notes,
                    assigned_at=assignment.assigned_at,
                    effective_status=derive_assignment_status(assignment, enrollment, now),
                    progress=enrollment.progress if enrollment else 0,
                    completed_at=enrollment.completed_at if enrollment else None,
                    learner_name=assignment.learner.full_name if assignment.learner else None,
                    course_title=assignment.course.title if assignment.course else None,
                    cpd_points=assignment.course.cpd_points if assignment.course else 0,
                )
            )
        return views

    def list_assignments(
        self,
        db: Session,
        current_user: User,
        status_filter: Optional[AssignmentStatusEnum] = None,
        sort: AssignmentSortEnum = AssignmentSortEnum.ASSIGNED_AT,
        now: Optional[datetime] = None,
    ) -> List[AssignmentView]:
        assignments = self._scoped_assignments(db, current_user, sort)
        views = self._build_views(db, assignments, now or utcnow())
        if status_filter is not None:
            views = [view for view in views if view.effective_status == status_filter]
        return views

    def get_status_summary(self, db: Session, current_user: User, now: Optional[datetime] = None) -> AssignmentStatusSummary:
        views = self.list_assignments(db, current_user, now=now)
        summary = AssignmentStatusSummary(all=len(views))
        for view in views:
            field = view.effective_status.value.lower()
            setattr(summary, field, getattr(summary, field) + 1)
        return summary


assignment_service = AssignmentService()
