# Importa todos os models para registrar as tabelas em Base.metadata
# (usado pelo alembic e pelos testes).
from app.db.base import Base
from app.models.user import User
from app.models.workshop import Workshop, workshop_students

__all__ = ["Base", "User", "Workshop", "workshop_students"]
