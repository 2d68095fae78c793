from fastapi import APIRouter

from app.platform.config import settings
from app.platform.response import ok_response

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check():
    return ok_response(service=settings.APP_NAME, env=settings.ENVIRONMENT, store=settings.STORE_BACKEND)
