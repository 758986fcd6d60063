from typing import List
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from app.core.cache import cache
from app.core.cache_config import CACHE_TTL
from app.core.decorators import cache_endpoint
from app.models.user import User
from app.schemas.certificate import Certificate, CertificateClaim
from app.schemas.response import APIResponse
from app.services.certificate import certificate_service
from app.utils import deps

router = APIRouter()


@router.post(
    "",
    response_model=APIResponse[Certificate],
    responses={201: {"description": "Certificate issued"}, 200: {"description": "Certificate already issued"}}
)
async def claim_certificate(
    *,
    db: Session = Depends(deps.get_transactional_db),
    claim_in: CertificateClaim,
    current_user: User = Depends(deps.get_current_user)
):
    certificate, created = certificate_service.claim_certificate(db, course_id=claim_in.course_id, current_user=current_user)
    if not created:
        return APIResponse(message="Certificate already issued", data=Certificate.model_validate(certificate))

    await cache.invalidate_user_cache(current_user.id)
    body = APIResponse(message="Certificate issued successfully", data=Certificate.model_validate(certificate))
    return JSONResponse(status_code=201, content=jsonable_encoder(body))


@router.get("", response_model=APIResponse[List[Certificate]])
@cache_endpoint(ttl=CACHE_TTL["my_certificates"], key_prefix="my_certificates")
async def list_my_certificates(
    *,
    db: Session = Depends(deps.get_db),
    current_user: User = Depends(deps.get_current_user)
):
    certificates = certificate_service.list_certificates(db, current_user=current_user)
    return APIResponse(
        message="Certificates retrieved successfully",
        data=[Certificate.model_validate(c) for c in certificates]
    )


@router.get("/{certificate_id}", response_model=APIResponse[Certificate])
def get_certificate(
    *,
    db: Session = Depends(deps.get_db),
    certificate_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    certificate = certificate_service.get_certificate(db, certificate_pk=certificate_id, current_user=current_user)
    return APIResponse(message="Certificate retrieved successfully", data=Certificate.model_validate(certificate))


@router.get("/{certificate_id}/download", response_class=HTMLResponse)
def download_certificate(
    *,
    db: Session = Depends(deps.get_db),
    certificate_id: int,
    current_user: User = Depends(deps.get_current_user)
):
    certificate = certificate_service.get_certificate(db, certificate_pk=certificate_id, current_user=current_user)
    html = certificate_service.render_certificate_html(certificate, learner=current_user)
    return HTMLResponse(
        content=html,
        headers={"Content-Disposition": f'inline; filename="{certificate.certificate_id}.html"'}
    )
