from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "Form Intake API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = False

    # ── Logging ─────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # ── Store ───────────────────────────────────
    # "sql" talks to DATABASE_URL through SQLAlchemy,
    # "rest" talks to a PostgREST (Supabase) endpoint.
    STORE_BACKEND: Literal["sql", "rest"] = "sql"

    DATABASE_URL: str = "sqlite+aiosqlite:///./data/form_intake.db"
    AUTO_CREATE_TABLES: bool = True

    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    STORE_TIMEOUT: float = 10.0

    # ── Form guard ──────────────────────────────
    FORM_SECRET: str = ""
    FORM_SECRET_HEADER: str = "x-form-secret"

    # ── CORS (front-end form) ───────────────────
    CORS_ALLOW_ORIGINS: str = "*"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _norm_log_level(cls, v) -> str:
        s = ("" if v is None else str(v)).strip().upper()
        return s or "INFO"

    @field_validator("SUPABASE_URL", mode="before")
    @classmethod
    def _norm_supabase_url(cls, v) -> str:
        return ("" if v is None else str(v)).strip().rstrip("/")

    @property
    def cors_origins(self) -> list[str]:
        parts = [p.strip() for p in self.CORS_ALLOW_ORIGINS.split(",")]
        return [p for p in parts if p] or ["*"]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
