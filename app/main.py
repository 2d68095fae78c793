from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.features.health.routes.health import router as health_router
from app.features.submissions.routes.submit import router as submit_router
from app.features.submissions.services.rest_store import create_rest_client
from app.platform.config import settings
from app.platform.db.session import engine, init_models
from app.platform.exceptions import add_exception_handlers
from app.platform.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.STORE_BACKEND == "rest":
        app.state.store_client = create_rest_client()
        logger.info(f"Using PostgREST store at {settings.SUPABASE_URL}")
    elif settings.AUTO_CREATE_TABLES:
        await init_models()
        logger.info("Using SQL store, tables ensured")

    if not settings.FORM_SECRET:
        logger.warning("FORM_SECRET is empty; every submission will be rejected")

    yield

    if settings.STORE_BACKEND == "rest":
        await app.state.store_client.aclose()
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Contact and communication-preference intake for the public signup form",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    # Root endpoint for basic info
    @app.get("/", tags=["Info"])
    def root():
        return {
            "app_name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs_url": "/docs",
            "submit_url": "/api/submit",
        }

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    add_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(submit_router)

    return app


app = create_app()
