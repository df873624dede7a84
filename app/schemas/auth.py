from pydantic import AliasChoices, BaseModel, Field

from app.schemas.user import UserOut


class LoginIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class LoginOut(BaseModel):
    message: str = "Login realizado com sucesso!"
    token: str
    user: UserOut


class RegisterIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=72)
    role: str = "user"
    ra: str | None = Field(default=None, max_length=30, validation_alias=AliasChoices("RA", "ra"))
    curso: str | None = Field(default=None, max_length=120)


class RegisterOut(BaseModel):
    message: str = "Usuário registrado com sucesso!"
    user: UserOut
