"""Closing a workshop: render every certificate, then flip the status.

The status only becomes ``finalizado`` once all PDFs exist on disk. Files are
rendered into a staging directory first and moved into
``workshop_<id>/`` in the same step that commits the status change, so a
failure leaves neither a finalized workshop without certificates nor stray
files for an active one.
"""

import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import AlreadyFinalizedError, InternalError
from app.models.workshop import STATUS_ATIVO, STATUS_FINALIZADO, Workshop
from app.services.certificates import (
    CertificateData,
    CertificateRenderError,
    RenderJob,
    certificate_filenames,
    certificates_root,
    render_batch,
    workshop_dir,
)

logger = logging.getLogger(__name__)

DEFAULT_PROFESSOR_NAME = "Equipe da oficina"


def build_jobs(workshop: Workshop, completed_at: datetime) -> list[RenderJob]:
    professor_name = workshop.professor.name if workshop.professor else DEFAULT_PROFESSOR_NAME
    filenames = certificate_filenames(workshop.students)
    return [
        RenderJob(
            student_id=student.id,
            filename=filenames[student.id],
            data=CertificateData(
                student_name=student.name,
                workshop_name=workshop.name,
                professor_name=professor_name,
                completed_at=completed_at,
            ),
        )
        for student in workshop.students
    ]


def _unlink_all(paths: list[Path]) -> None:
    for path in paths:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.error("Não foi possível remover %s: %s", path, exc)


def finalize_workshop(db: Session, workshop: Workshop) -> list[Path]:
    """Generate one certificate per enrolled student and mark the workshop finished.

    Returns the final paths of the generated PDFs. Raises AlreadyFinalizedError
    if the workshop is (or concurrently became) finalized, and InternalError
    when rendering or persisting fails; in both cases nothing is left behind.
    """
    if workshop.is_finalized:
        raise AlreadyFinalizedError()

    completed_at = datetime.now(timezone.utc)
    jobs = build_jobs(workshop, completed_at)

    root = certificates_root()
    try:
        root.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".staging_{workshop.id}_", dir=root))
    except OSError as exc:
        raise InternalError("Erro ao finalizar workshop", cause=exc) from exc

    moved: list[Path] = []
    try:
        try:
            render_batch(jobs, staging)
        except (CertificateRenderError, OSError) as exc:
            raise InternalError("Erro ao finalizar workshop", cause=exc) from exc

        # só um pedido concorrente consegue sair de "ativo"
        try:
            result = db.execute(
                update(Workshop)
                .where(Workshop.id == workshop.id, Workshop.status == STATUS_ATIVO)
                .values(status=STATUS_FINALIZADO, data_finalizacao=completed_at)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as exc:
            db.rollback()
            raise InternalError("Erro ao finalizar workshop", cause=exc) from exc

        if result.rowcount != 1:
            db.rollback()
            raise AlreadyFinalizedError()

        try:
            target = workshop_dir(workshop.id)
            target.mkdir(parents=True, exist_ok=True)
            for job in jobs:
                destination = target / job.filename
                os.replace(staging / job.filename, destination)
                moved.append(destination)
            db.commit()
        except (OSError, SQLAlchemyError) as exc:
            db.rollback()
            _unlink_all(moved)
            raise InternalError("Erro ao finalizar workshop", cause=exc) from exc
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    db.refresh(workshop)
    logger.info("Workshop %s finalizado: %s certificado(s)", workshop.id, len(moved))
    return moved
