from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # hash corrompido ou em formato desconhecido
        return False


def sign(payload: Dict[str, Any], secret: str, ttl_seconds: int = 60 * 60) -> str:
    now = datetime.now(timezone.utc)
    body = {
        "iat": now,
        "exp": now + timedelta(seconds=int(ttl_seconds)),
        **payload,
    }
    return jwt.encode(body, secret, algorithm=settings.AUTH_ALGORITHM)


def verify(token: str, secret: str) -> Optional[Dict[str, Any]]:
    """Return the token claims, or None when the signature or expiry is bad."""
    try:
        return jwt.decode(token, secret, algorithms=[settings.AUTH_ALGORITHM])
    except JWTError:
        return None


def create_access_token(user) -> str:
    return sign(
        {"sub": str(user.id), "id": user.id, "name": user.name, "role": user.role},
        secret=settings.AUTH_SECRET,
        ttl_seconds=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
