from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.constants import UserRoleEnum
from app.models.user import User as UserModel
from app.schemas.organization import Organization, OrganizationCreate, OrganizationUpdate
from app.schemas.response import APIResponse
from app.schemas.user import LearnerInvite, LearnerInviteResult, LearnerSummary, User
from app.services.organization import organization_service
from app.utils import deps

router = APIRouter()

require_super_admin = deps.require_roles(UserRoleEnum.SUPER_ADMIN)
require_org_manager = deps.require_roles(UserRoleEnum.SUPER_ADMIN, UserRoleEnum.CORPORATE_ADMIN)


@router.post("", response_model=APIResponse[Organization], status_code=status.HTTP_201_CREATED)
def create_organization(
    *,
    db: Session = Depends(deps.get_transactional_db),
    org_in: OrganizationCreate,
    current_user: UserModel = Depends(require_super_admin)
):
    organization = organization_service.create_organization(db, org_in=org_in)
    return APIResponse(message="Organization created successfully", data=Organization.model_validate(organization))


@router.get("", response_model=APIResponse[List[Organization]])
def list_organizations(
    *,
    db: Session = Depends(deps.get_db),
    skip: int = 0,
    limit: int = 100,
    current_user: UserModel = Depends(require_super_admin)
):
    organizations = organization_service.list_organizations(db, skip=skip, limit=limit)
    return APIResponse(
        message="Organizations retrieved successfully",
        data=[Organization.model_validate(o) for o in organizations]
    )


@router.get("/{organization_id}", response_model=APIResponse[Organization])
def get_organization(
    *,
    db: Session = Depends(deps.get_db),
    organization_id: int,
    current_user: UserModel = Depends(require_org_manager)
):
    organization = organization_service.get_organization(db, organization_id, current_user)
    return APIResponse(message="Organization retrieved successfully", data=Organization.model_validate(organization))


@router.put("/{organization_id}", response_model=APIResponse[Organization])
def update_organization(
    *,
    db: Session = Depends(deps.get_transactional_db),
    organization_id: int,
    org_in: OrganizationUpdate,
    current_user: UserModel = Depends(require_super_admin)
):
    organization = organization_service.update_organization(db, organization_id, org_in)
    return APIResponse(message="Organization updated successfully", data=Organization.model_validate(organization))


@router.get("/{organization_id}/learners", response_model=APIResponse[List[LearnerSummary]])
def list_learners(
    *,
    db: Session = Depends(deps.get_db),
    organization_id: int,
    current_user: UserModel = Depends(require_org_manager)
):
    learners = organization_service.list_learners(db, organization_id, current_user)
    return APIResponse(message="Learners retrieved successfully", data=learners)


@router.post("/{organization_id}/learners", response_model=APIResponse[LearnerInviteResult], status_code=status.HTTP_201_CREATED)
def invite_learner(
    *,
    db: Session = Depends(deps.get_transactional_db),
    organization_id: int,
    invite_in: LearnerInvite,
    current_user: UserModel = Depends(require_org_manager)
):
    learner, temporary_password = organization_service.invite_learner(db, organization_id, invite_in, current_user)
    return APIResponse(
        message="Learner added to organization",
        data=LearnerInviteResult(user=User.model_validate(learner), temporary_password=temporary_password)
    )
