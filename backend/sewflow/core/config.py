"""Application configuration loaded from environment variables."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed settings exposed via dependency injection throughout the app."""

    # Read .env with BOM tolerance; case-sensitive keys
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=True,
    )

    APP_NAME: str = "Sewflow Production API"
    ENV: str = "dev"  # dev | staging | prod
    DEBUG: bool = False

    # CORS
    CORS_ALLOWED_ORIGINS: list[str] = Field(default_factory=list)

    # Storage: "sql" talks to the database below, "memory" keeps everything in-process
    STORAGE_BACKEND: Literal["sql", "memory"] = "sql"

    # DB
    DB_URL: str | None = None  # full SQLAlchemy URL, wins over the DB_* parts
    DB_HOST: str = "127.0.0.1"
    DB_PORT: int = 3306
    DB_USER: str = "sewflow"
    DB_PASSWORD: str = ""  # set via env/.env
    DB_NAME: str = "sewflow"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_RETRY_ATTEMPTS: int = 4
    DB_RETRY_BASE_DELAY: float = 0.05
    DB_RETRY_JITTER: float = 0.025
    DB_NOWAIT_LOCKS: bool = False

    # Maximum allowed request body size.
    MAX_UPLOAD_BYTES: int = 1 * 1024 * 1024  # 1 MB

    # What to do when a distribution asks for more pieces than remain in the
    # cut balance: "reject" refuses the whole request, "clamp" floors the
    # balance at zero and keeps going.
    OVERDRAW_POLICY: Literal["reject", "clamp"] = "reject"

    # Order number handed out when no numeric order id exists yet.
    FIRST_ORDER_ID: int = 1001

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return (
            f"mysql+aiomysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"
        )


settings = Settings()
