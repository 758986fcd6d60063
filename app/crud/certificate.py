from sqlalchemy.orm import Session
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.certificate import Certificate


class CRUDCertificate(CRUDBase[Certificate, dict, dict]):

    def get_by_user_and_course(self, db: Session, user_id: int, course_id: int) -> Optional[Certificate]:
        return (
            db.query(Certificate)
            .filter(Certificate.user_id == user_id)
            .filter(Certificate.course_id == course_id)
            .first()
        )

    def get_by_user(self, db: Session, user_id: int) -> List[Certificate]:
        return (
            db.query(Certificate)
            .filter(Certificate.user_id == user_id)
            .order_by(Certificate.issued_at.desc(), Certificate.id.desc())
            .all()
        )

    def count_by_user_and_course(self, db: Session, user_id: int, course_id: int) -> int:
        return (
            db.query(Certificate)
            .filter(Certificate.user_id == user_id, Certificate.course_id == course_id)
            .count()
        )


certificate = CRUDCertificate(Certificate)
