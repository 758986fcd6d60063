from typing import Optional
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.organization import Organization
from app.schemas.organization import OrganizationCreate


class CRUDOrganization(CRUDBase[Organization, OrganizationCreate, dict]):
    def get_by_slug(self, db: Session, *, slug: str) -> Optional[Organization]:
        return db.query(Organization).filter(Organization.slug == slug).first()


organization = CRUDOrganization(Organization)
