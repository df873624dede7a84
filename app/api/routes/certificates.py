import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.api.routes.workshops import load_workshop
from app.core.config import settings
from app.core.exceptions import ForbiddenRoleError, NotFoundError, ValidationError
from app.db.session import get_db
from app.models.user import ROLE_STUDENT
from app.schemas.certificate import CertificateOut
from app.services.certificates import certificate_filenames, list_certificate_files, resolve_certificate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workshops", tags=["certificates"])


def _base_url(request: Request) -> str:
    return (settings.PUBLIC_BASE_URL or str(request.base_url)).rstrip("/")


@router.get("/{workshop_id}/certificates", response_model=list[CertificateOut])
def list_certificates(
    workshop_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    load_workshop(db, workshop_id)

    files = list_certificate_files(workshop_id)
    if files is None:
        raise NotFoundError("Nenhum certificado encontrado para este workshop.")
    if not files:
        raise NotFoundError("Nenhum certificado disponível.")

    base = _base_url(request)
    return [
        CertificateOut(name=name, url=f"{base}/workshops/{workshop_id}/certificates/{name}")
        for name in files
    ]


@router.get("/{workshop_id}/certificates/{filename}")
def download_certificate(
    workshop_id: int,
    filename: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    path = resolve_certificate(workshop_id, filename)
    if path is None:
        raise ValidationError("Nome de arquivo inválido.")

    workshop = load_workshop(db, workshop_id)

    # aluno só baixa o próprio certificado
    if current_user["role"] == ROLE_STUDENT:
        own = certificate_filenames(workshop.students).get(current_user["id"])
        if own != filename:
            logger.warning(
                "Aluno %s tentou baixar %s do workshop %s", current_user["id"], filename, workshop_id
            )
            raise ForbiddenRoleError("Acesso negado. Você só pode baixar o seu certificado.")

    if not path.is_file():
        raise NotFoundError("Certificado não encontrado.")

    return FileResponse(path, media_type="application/pdf", filename=filename)
