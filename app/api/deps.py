from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import settings
from app.core.exceptions import ForbiddenRoleError, InvalidTokenError, MissingTokenError
from app.core.security import verify
from app.models.user import STAFF_ROLES

bearer_scheme = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict | None:
    """Claims of the bearer token, or None when no token was sent.

    A token that is present but invalid is still rejected.
    """
    if credentials is None or not credentials.credentials:
        return None

    payload = verify(credentials.credentials, settings.AUTH_SECRET)
    if not payload or "id" not in payload or "role" not in payload:
        raise InvalidTokenError()

    return payload


def get_current_user(current_user: dict | None = Depends(get_optional_user)) -> dict:
    """Claims of the bearer token: ``{"id", "name", "role", ...}``."""
    if current_user is None:
        raise MissingTokenError()
    return current_user


def require_roles(*roles: str, message: str | None = None):
    def role_dependency(current_user: dict = Depends(get_current_user)) -> dict:
        if current_user.get("role") not in roles:
            raise ForbiddenRoleError(message)
        return current_user

    return role_dependency


def require_staff(message: str | None = None):
    return require_roles(*STAFF_ROLES, message=message)
