from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class CertificateClaim(BaseModel):
    course_id: int


class Certificate(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    certificate_id: str
    user_id: int
    course_id: int
    course_name: str
    instructor_name: Optional[str] = None
    organization_name: str
    cpd_points: int
    issued_at: datetime
