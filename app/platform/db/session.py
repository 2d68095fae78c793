import os

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.platform.config import settings
from app.platform.db.base import Base


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_recycle": 1800,
        "pool_size": 20,
        "max_overflow": 30,  # (burst capacity)
        "pool_timeout": 30,
    }


def _ensure_sqlite_dir(database_url: str) -> None:
    """
    Ensure the parent folder exists for file-based SQLite URLs like
    sqlite+aiosqlite:///./data/form_intake.db
    """
    if ":///" not in database_url or ":memory:" in database_url:
        return
    folder = os.path.dirname(database_url.split(":///", 1)[1])
    if folder:
        os.makedirs(folder, exist_ok=True)


if settings.is_sqlite:
    _ensure_sqlite_dir(settings.DATABASE_URL)

# Single, shared engine for the app process
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    pool_pre_ping=True,
    **_engine_options(settings.DATABASE_URL),
)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, autocommit=False)


async def get_db():
    async with SessionLocal() as session:
        yield session


async def init_models(bind=None) -> None:
    """
    Register models, then create missing tables.
    Non-destructive; production databases are migrated with Alembic instead.
    """
    from app.features.submissions.models import contact, preferences, submission  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
