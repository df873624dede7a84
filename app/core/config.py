from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    AUTH_SECRET: str  # sem default: a chave vem sempre do ambiente
    AUTH_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    CERTIFICATES_DIR: Path = Path("certificates")
    CERTIFICATE_WORKERS: int = 4
    PUBLIC_BASE_URL: str | None = None

    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:4000,http://localhost:5173"

    BOOTSTRAP_ADMIN_EMAIL: str | None = None
    BOOTSTRAP_ADMIN_PASSWORD: str | None = None
    BOOTSTRAP_ADMIN_NAME: str = "Administrador"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
