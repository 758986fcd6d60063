import logging
import time
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from slugify import slugify
from sqlalchemy.orm import Session

from app.core.constants import UserRoleEnum
from app.core.security import generate_temp_password, get_password_hash
from app.crud.organization import organization as crud_organization
from app.crud.user import user as crud_user
from app.models.organization import Organization
from app.models.user import User
from app.schemas.organization import OrganizationCreate, OrganizationUpdate
from app.schemas.user import LearnerInvite, LearnerSummary
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class OrganizationService:

    def create_organization(self, db: Session, org_in: OrganizationCreate) -> Organization:
        slug = slugify(org_in.name) or "organization"
        if crud_organization.get_by_slug(db, slug=slug):
            slug = f"{slug}-{int(time.time() * 1000)}"

        organization = crud_organization.create(db, obj_in={**org_in.model_dump(), "slug": slug})
        logger.info(f"Organization {organization.id} '{organization.name}' created")
        return organization

    def list_organizations(self, db: Session, skip: int = 0, limit: int = 100) -> List[Organization]:
        return crud_organization.get_multi(db, skip=skip, limit=limit)

    def get_organization(self, db: Session, organization_id: int, current_user: User) -> Organization:
        organization = crud_organization.get(db, id=organization_id)
        if not organization:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")
        permission_helper.require_organization_management_permission(current_user, organization_id)
        return organization

    def update_organization(self, db: Session, organization_id: int, org_in: OrganizationUpdate) -> Organization:
        organization = crud_organization.get(db, id=organization_id)
        if not organization:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Organization not found")

        if org_in.max_learners is not None:
            current = crud_user.count_learners_by_organization(db, organization_id=organization_id)
            if org_in.max_learners < current:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Organization already has {current} learners"
                )

        organization = crud_organization.update(db, db_obj=organization, obj_in=org_in)
        logger.info(f"Organization {organization_id} updated")
        return organization

    def list_learners(self, db: Session, organization_id: int, current_user: User) -> List[LearnerSummary]:
        self.get_organization(db, organization_id, current_user)
        rows = crud_user.get_learners_with_enrollment_counts(db, organization_id=organization_id)
        return [
            LearnerSummary.model_validate(learner).model_copy(update={"enrollment_count": count or 0})
            for learner, count in rows
        ]

    def invite_learner(
        self, db: Session, organization_id: int, invite_in: LearnerInvite, current_user: User
    ) -> Tuple[User, Optional[str]]:
        """Attach a learner to the organization, creating the account if needed.

        Returns the learner and, for a new account, its temporary password.
        """
        organization = self.get_organization(db, organization_id, current_user)

        existing = crud_user.get_by_email(db, email=invite_in.email)
        if existing and existing.organization_id == organization_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Learner is already a member of this organization"
            )
        if existing and existing.organization_id is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User already belongs to another organization"
            )

        if crud_user.count_learners_by_organization(db, organization_id=organization_id) >= organization.max_learners:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Organization has reached its limit of {organization.max_learners} learners"
            )

        if existing:
            learner = crud_user.update(
                db,
                db_obj=existing,
                obj_in={
                    "organization_id": organization_id,
                    "job_title": invite_in.job_title or existing.job_title,
                    "staff_id": invite_in.staff_id or existing.staff_id,
                },
            )
            logger.info(f"User {learner.id} added to organization {organization_id}")
            return learner, None

        temporary_password = generate_temp_password()
        learner = crud_user.create(
            db,
            obj_in={
                "full_name": invite_in.full_name.strip(),
                "email": invite_in.email.lower(),
                "hashed_password": get_password_hash(temporary_password),
                "role": UserRoleEnum.LEARNER,
                "organization_id": organization_id,
                "job_title": invite_in.job_title,
                "staff_id": invite_in.staff_id,
                "is_active": True,
            },
        )
        logger.info(f"Learner {learner.id} invited to organization {organization_id}")
        return learner, temporary_password


organization_service = OrganizationService()
