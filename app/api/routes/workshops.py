import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.api.deps import get_current_user, require_staff
from app.core.exceptions import (
    ConflictError,
    ForbiddenRoleError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from app.db.session import get_db
from app.models.user import ROLE_ADMIN, ROLE_STUDENT, STAFF_ROLES, User
from app.models.workshop import Workshop
from app.schemas.workshop import (
    FinalizeOut,
    MessageOut,
    RosterChange,
    WorkshopCreate,
    WorkshopCreated,
    WorkshopOut,
)
from app.services.finalization import finalize_workshop

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workshops", tags=["workshops"])


def load_workshop(db: Session, workshop_id: int) -> Workshop:
    try:
        workshop = db.execute(
            select(Workshop)
            .where(Workshop.id == workshop_id)
            .options(selectinload(Workshop.professor), selectinload(Workshop.students))
        ).scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise InternalError("Erro ao buscar workshop", cause=exc) from exc

    if not workshop:
        raise NotFoundError("Workshop não encontrado")
    return workshop


@router.post("", response_model=WorkshopCreated, status_code=status.HTTP_201_CREATED)
def create_workshop(
    payload: WorkshopCreate,
    db: Session = Depends(get_db),
    current_user=Depends(require_staff("Acesso negado. Apenas professores ou administradores podem criar workshops.")),
):
    professor_id = current_user["id"]

    # admin pode atribuir a oficina a outro professor
    if payload.professor_id is not None and payload.professor_id != professor_id:
        if current_user["role"] != ROLE_ADMIN:
            raise ForbiddenRoleError("Apenas administradores podem criar workshops para outro professor.")
        professor = db.get(User, payload.professor_id)
        if not professor:
            raise NotFoundError("Professor não encontrado")
        if professor.role not in STAFF_ROLES:
            raise ValidationError("O usuário informado não é professor.")
        professor_id = professor.id

    workshop = Workshop(
        name=payload.name.strip(),
        description=payload.description,
        professor_id=professor_id,
    )
    try:
        db.add(workshop)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError("Erro ao criar workshop", cause=exc) from exc

    logger.info("Workshop %s criado por usuário %s", workshop.id, current_user["id"])
    workshop = load_workshop(db, workshop.id)
    return WorkshopCreated(workshop=WorkshopOut.model_validate(workshop))


@router.get("", response_model=list[WorkshopOut])
def list_workshops(db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    try:
        return db.execute(
            select(Workshop)
            .options(selectinload(Workshop.professor), selectinload(Workshop.students))
            .order_by(Workshop.id)
        ).scalars().all()
    except SQLAlchemyError as exc:
        raise InternalError("Erro ao listar workshops", cause=exc) from exc


@router.post("/students", response_model=MessageOut)
def add_student(
    payload: RosterChange,
    db: Session = Depends(get_db),
    current_user=Depends(require_staff("Acesso negado. Apenas professores ou administradores podem adicionar alunos.")),
):
    workshop = load_workshop(db, payload.workshop_id)
    if workshop.is_finalized:
        raise ValidationError("Não é possível alterar alunos de um workshop finalizado.")

    if any(s.id == payload.student_id for s in workshop.students):
        raise ConflictError("Estudante já vinculado ao workshop")

    student = db.get(User, payload.student_id)
    if not student:
        raise NotFoundError("Estudante não encontrado")
    if student.role != ROLE_STUDENT:
        raise ValidationError("O usuário informado não é um estudante.")

    try:
        workshop.students.append(student)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError("Erro ao adicionar alunos ao workshop", cause=exc) from exc

    logger.info("Aluno %s adicionado ao workshop %s", student.id, workshop.id)
    return MessageOut(message="Aluno adicionado ao workshop com sucesso.")


@router.delete("/students", response_model=MessageOut)
def remove_student(
    payload: RosterChange,
    db: Session = Depends(get_db),
    current_user=Depends(require_staff("Acesso negado. Apenas professores ou administradores podem remover alunos.")),
):
    workshop = load_workshop(db, payload.workshop_id)
    if workshop.is_finalized:
        raise ValidationError("Não é possível alterar alunos de um workshop finalizado.")

    student = next((s for s in workshop.students if s.id == payload.student_id), None)
    if student is None:
        raise NotFoundError("Estudante não encontrado")

    try:
        workshop.students.remove(student)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError("Erro ao remover estudante do workshop", cause=exc) from exc

    logger.info("Aluno %s removido do workshop %s", student.id, workshop.id)
    return MessageOut(message="Estudante removido do workshop com sucesso.")


@router.get("/{workshop_id}", response_model=WorkshopOut)
def get_workshop(workshop_id: int, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    return load_workshop(db, workshop_id)


@router.post("/{workshop_id}/finalize", response_model=FinalizeOut)
def finalize(
    workshop_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(require_staff("Acesso negado. Apenas administradores ou professores podem finalizar workshops.")),
):
    workshop = load_workshop(db, workshop_id)
    generated = finalize_workshop(db, workshop)
    return FinalizeOut(
        message="Workshop finalizado com sucesso! Certificados gerados.",
        certificates=len(generated),
    )
