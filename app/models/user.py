from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base

ROLE_ADMIN = "admin"
ROLE_PROFESSOR = "professor"
ROLE_STUDENT = "user"

ROLES = (ROLE_ADMIN, ROLE_PROFESSOR, ROLE_STUDENT)
STAFF_ROLES = (ROLE_ADMIN, ROLE_PROFESSOR)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)  # hash bcrypt

    # admin, professor, user (aluno)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_STUDENT, index=True)

    # obrigatórios só para professor
    ra: Mapped[str | None] = mapped_column(String(30), nullable=True)
    curso: Mapped[str | None] = mapped_column(String(120), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
