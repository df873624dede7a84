"""Domain errors and their HTTP mapping.

Routes and services raise these; ``register_exception_handlers`` turns them into
``{"message": ...}`` JSON bodies, the shape the front-end reads.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Erro interno no servidor"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class MissingTokenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Token não fornecido no cabeçalho Authorization"


class InvalidTokenError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Token inválido ou expirado"


class ForbiddenRoleError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Acesso negado."


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Credenciais inválidas"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Recurso não encontrado"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Dados inválidos"


class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Registro já existente"


class AlreadyFinalizedError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "O workshop já está finalizado."


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str | None = None, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    body = {"message": exc.message}
    if isinstance(exc, InternalError) and exc.cause is not None:
        body["error"] = str(exc.cause)
    return JSONResponse(status_code=exc.status_code, content=body)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Erro não tratado em %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Erro interno no servidor", "error": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
