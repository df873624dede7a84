import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_optional_user, require_staff
from app.core.exceptions import (
    ConflictError,
    ForbiddenRoleError,
    InternalError,
    InvalidCredentialsError,
    MissingTokenError,
    NotFoundError,
    ValidationError,
)
from app.core.security import create_access_token, hash_password, verify_password
from app.db.session import get_db
from app.models.user import ROLE_ADMIN, ROLE_PROFESSOR, ROLE_STUDENT, ROLES, STAFF_ROLES, User
from app.schemas.auth import LoginIn, LoginOut, RegisterIn, RegisterOut
from app.schemas.user import UserOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# quem pode cadastrar cada papel; aluno se cadastra sozinho
REGISTRAR_ROLES = {
    ROLE_STUDENT: None,
    ROLE_PROFESSOR: STAFF_ROLES,
    ROLE_ADMIN: (ROLE_ADMIN,),
}


def check_registrar(role: str, current_user: dict | None) -> None:
    allowed = REGISTRAR_ROLES[role]
    if allowed is None:
        return
    if current_user is None:
        raise MissingTokenError()
    if current_user["role"] not in allowed:
        raise ForbiddenRoleError(f"Acesso negado. Seu perfil não pode cadastrar usuários com role {role}.")


@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterIn,
    db: Session = Depends(get_db),
    current_user: dict | None = Depends(get_optional_user),
):
    role = payload.role.strip().lower()
    if role not in ROLES:
        raise ValidationError(f"Role inválida: {payload.role}. Use admin, professor ou user.")
    check_registrar(role, current_user)

    ra = (payload.ra or "").strip() or None
    curso = (payload.curso or "").strip() or None
    if role == ROLE_PROFESSOR and (not ra or not curso):
        raise ValidationError("RA e curso são obrigatórios para professores.")
    if role != ROLE_PROFESSOR:
        ra, curso = None, None

    email = payload.email.strip().lower()
    try:
        exists = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if exists:
            raise ConflictError("E-mail já está em uso")

        user = User(
            name=payload.name.strip(),
            email=email,
            password=hash_password(payload.password),
            role=role,
            ra=ra,
            curso=curso,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise ConflictError("E-mail já está em uso")
    except SQLAlchemyError as exc:
        db.rollback()
        raise InternalError("Erro ao registrar usuário", cause=exc) from exc

    logger.info("Usuário registrado: id=%s role=%s", user.id, user.role)
    return RegisterOut(user=UserOut.model_validate(user))


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    try:
        user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise InternalError("Erro interno no servidor", cause=exc) from exc

    if not user:
        raise NotFoundError("Usuário não encontrado")

    if not verify_password(payload.password, user.password):
        logger.warning("Falha de login para %s", email)
        raise InvalidCredentialsError()

    return LoginOut(token=create_access_token(user), user=UserOut.model_validate(user))


def _list_by_role(db: Session, role: str) -> list[User]:
    try:
        return db.execute(select(User).where(User.role == role).order_by(User.name, User.id)).scalars().all()
    except SQLAlchemyError as exc:
        raise InternalError("Erro ao listar usuários", cause=exc) from exc


@router.get("/professors", response_model=list[UserOut])
def list_professors(
    db: Session = Depends(get_db),
    current_user=Depends(require_staff("Acesso negado. Apenas administradores ou professores podem listar professores.")),
):
    return _list_by_role(db, ROLE_PROFESSOR)


@router.get("/students", response_model=list[UserOut])
def list_students(
    db: Session = Depends(get_db),
    current_user=Depends(require_staff("Acesso negado. Apenas administradores ou professores podem listar alunos.")),
):
    return _list_by_role(db, ROLE_STUDENT)


@router.get("/me", response_model=UserOut)
def me(db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    user = db.get(User, current_user["id"])
    if not user:
        raise NotFoundError("Usuário não encontrado")
    return user
