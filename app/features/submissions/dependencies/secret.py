from fastapi import Request

from app.features.submissions.utils.normalize import secret_matches
from app.platform.config import settings
from app.platform.exceptions import UnauthorizedError
from app.platform.logger import get_logger

logger = get_logger(__name__)


async def require_form_secret(request: Request) -> None:
    provided = request.headers.get(settings.FORM_SECRET_HEADER)
    if not settings.FORM_SECRET:
        logger.error("FORM_SECRET is not configured; rejecting submission")
        raise UnauthorizedError()
    if not secret_matches(provided, settings.FORM_SECRET):
        raise UnauthorizedError()
