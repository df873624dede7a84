import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.logging_config import configure_logging
from app.core.security import hash_password
from app.db.session import SessionLocal
from app.models.user import ROLE_ADMIN, User
from app.services.certificates import certificates_root, shutdown_executor, start_executor

from app.api.routes.auth import router as auth_router
from app.api.routes.workshops import router as workshops_router
from app.api.routes.certificates import router as certificates_router

logger = logging.getLogger(__name__)


def ensure_bootstrap_admin():
    email = (settings.BOOTSTRAP_ADMIN_EMAIL or "").strip().lower()
    password = settings.BOOTSTRAP_ADMIN_PASSWORD
    if not email or not password:
        return

    db = SessionLocal()
    try:
        u = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if not u:
            db.add(User(
                name=settings.BOOTSTRAP_ADMIN_NAME,
                email=email,
                password=hash_password(password),
                role=ROLE_ADMIN,
            ))
            db.commit()
            logger.info("[BOOTSTRAP] Admin criado: %s", email)
        else:
            logger.info("[BOOTSTRAP] Admin OK: %s", email)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    certificates_root().mkdir(parents=True, exist_ok=True)
    ensure_bootstrap_admin()
    start_executor()
    yield
    shutdown_executor()


app = FastAPI(title="Oficinas API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(workshops_router)
app.include_router(certificates_router)


@app.get("/health")
def health():
    return {"status": "ok"}
