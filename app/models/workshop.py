from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.user import User

STATUS_ATIVO = "ativo"
STATUS_FINALIZADO = "finalizado"

# roster: a PK composta impede matricular o mesmo aluno duas vezes
workshop_students = Table(
    "workshop_students",
    Base.metadata,
    Column("workshop_id", ForeignKey("workshops.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Workshop(Base):
    __tablename__ = "workshops"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # "ativo" -> "finalizado", uma única vez
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=STATUS_ATIVO, index=True)
    data_finalizacao: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    professor_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    professor: Mapped[User | None] = relationship(foreign_keys=[professor_id])
    students: Mapped[list[User]] = relationship(secondary=workshop_students, order_by=User.name)

    @property
    def is_finalized(self) -> bool:
        return self.status == STATUS_FINALIZADO
