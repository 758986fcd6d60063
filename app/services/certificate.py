import os
import logging
import secrets
import string
from typing import List, Tuple

from fastapi import HTTPException, status
from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import CERTIFICATE_ID_LENGTH, CERTIFICATE_ID_PREFIX
from app.crud.certificate import certificate as crud_certificate
from app.crud.course import course as crud_course
from app.crud.enrollment import enrollment as crud_enrollment
from app.models.certificate import Certificate
from app.models.course import Course
from app.models.user import User
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)

CERTIFICATE_ID_ALPHABET = string.ascii_uppercase + string.digits
MAX_ISSUE_ATTEMPTS = 3


def generate_certificate_id() -> str:
    suffix = "".join(secrets.choice(CERTIFICATE_ID_ALPHABET) for _ in range(CERTIFICATE_ID_LENGTH))
    return f"{CERTIFICATE_ID_PREFIX}-{suffix}"


class CertificateService:
    _template_env = None

    @classmethod
    def _get_template_env(cls):
        if cls._template_env is None:
            template_dir = os.path.join(
                os.path.dirname(os.path.abspath(__file__)),
                '..',
                'templates'
            )
            cls._template_env = Environment(
                loader=FileSystemLoader(template_dir),
                autoescape=select_autoescape(['html']),
            )
        return cls._template_env

    def _snapshot(self, course: Course, user: User) -> dict:
        organization_name = user.organization.name if user.organization else settings.PLATFORM_NAME
        return {
            "user_id": user.id,
            "course_id": course.id,
            "course_name": course.title,
            "instructor_name": course.instructor.full_name if course.instructor else None,
            "organization_name": organization_name,
            "cpd_points": course.cpd_points or 0,
        }

    def _issue(self, db: Session, course: Course, user: User) -> Tuple[Certificate, bool]:
        snapshot = self._snapshot(course, user)

        for attempt in range(1, MAX_ISSUE_ATTEMPTS + 1):
            try:
                certificate = crud_certificate.create(
                    db,
                    obj_in={**snapshot, "certificate_id": generate_certificate_id(), "issued_at": utcnow()},
                )
                logger.info(
                    f"Issued certificate {certificate.certificate_id} to user {user.id} for course {course.id}"
                )
                return certificate, True
            except IntegrityError:
                db.rollback()
                # Lost a race with a concurrent claim for the same pair
                existing = crud_certificate.get_by_user_and_course(db, user_id=user.id, course_id=course.id)
                if existing:
                    return existing, False
                logger.warning(f"Certificate id collision on attempt {attempt}, retrying")

        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not allocate a certificate id"
        )

    def claim_certificate(self, db: Session, course_id: int, current_user: User) -> Tuple[Certificate, bool]:
        """Return the learner's certificate for a completed course, issuing it on first claim."""
        course = crud_course.get(db, id=course_id)
        if not course:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")

        enrollment = crud_enrollment.get_by_user_and_course(db, user_id=current_user.id, course_id=course_id)
        if not enrollment:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enrolled in this course")

        existing = crud_certificate.get_by_user_and_course(db, user_id=current_user.id, course_id=course_id)
        if existing:
            return existing, False

        if enrollment.completed_at is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Course not completed yet")

        return self._issue(db, course, current_user)

    def list_certificates(self, db: Session, current_user: User) -> List[Certificate]:
        return crud_certificate.get_by_user(db, user_id=current_user.id)

    def get_certificate(self, db: Session, certificate_pk: int, current_user: User) -> Certificate:
        certificate = crud_certificate.get(db, id=certificate_pk)
        if not certificate:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Certificate not found")
        if certificate.user_id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have access to this certificate"
            )
        return certificate

    def render_certificate_html(self, certificate: Certificate, learner: User) -> str:
        template = self._get_template_env().get_template("certificate.html")
        return template.render(
            certificate=certificate,
            learner_name=learner.full_name,
            platform_name=settings.PLATFORM_NAME,
        )


certificate_service = CertificateService()
