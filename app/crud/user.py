from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.constants import UserRoleEnum
from app.crud.base import CRUDBase
from app.models.enrollment import Enrollment
from app.models.user import User
from app.schemas.user import UserCreate


class CRUDUser(CRUDBase[User, UserCreate, dict]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def get_learners_with_enrollment_counts(self, db: Session, *, organization_id: int) -> List[Tuple[User, int]]:
        enrollment_count = (
            db.query(func.count(Enrollment.id))
            .filter(Enrollment.user_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        return (
            db.query(User, enrollment_count)
            .filter(User.organization_id == organization_id, User.role == UserRoleEnum.LEARNER)
            .order_by(User.full_name)
            .all()
        )

    def count_learners_by_organization(self, db: Session, *, organization_id: int) -> int:
        return (
            db.query(func.count(User.id))
            .filter(User.organization_id == organization_id, User.role == UserRoleEnum.LEARNER)
            .scalar()
        )


user = CRUDUser(User)
