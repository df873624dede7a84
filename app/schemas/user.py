from pydantic import BaseModel, Field


class UserSummary(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True


class UserOut(UserSummary):
    role: str
    ra: str | None = Field(default=None, serialization_alias="RA")
    curso: str | None = None
