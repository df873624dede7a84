from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

from app.schemas.user import UserSummary


class WorkshopCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    professor_id: int | None = Field(default=None, validation_alias=AliasChoices("professorId", "professor_id"))


class WorkshopOut(BaseModel):
    id: int
    name: str
    description: str | None
    status: str
    data_finalizacao: datetime | None = Field(default=None, serialization_alias="dataFinalizacao")
    professor_id: int | None = Field(default=None, serialization_alias="professorId")
    professor: UserSummary | None = None
    students: list[UserSummary] = []

    class Config:
        from_attributes = True


class WorkshopCreated(BaseModel):
    message: str = "Workshop criado com sucesso!"
    workshop: WorkshopOut


class RosterChange(BaseModel):
    workshop_id: int = Field(..., validation_alias=AliasChoices("workshopId", "workshop_id"))
    student_id: int = Field(
        ..., validation_alias=AliasChoices("studentId", "selectedStudentId", "student_id")
    )


class MessageOut(BaseModel):
    message: str


class FinalizeOut(MessageOut):
    certificates: int
