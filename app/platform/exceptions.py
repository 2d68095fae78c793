from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.platform.logger import get_logger
from app.platform.response import error_response

logger = get_logger(__name__)

SERVER_ERROR_MESSAGE = "Server error"


class AppError(Exception):
    """Base class for errors that map to a fixed caller-visible response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = SERVER_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"


class MissingFieldsError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Missing required fields"


class StoreError(AppError):
    """
    Any failure reported by the backing store.

    `detail` and `code` are for server-side logs only; the response body is
    always the generic server error.
    """

    def __init__(self, detail: str, code: Optional[str] = None):
        super().__init__(SERVER_ERROR_MESSAGE)
        self.detail = detail
        self.code = code

    def __str__(self) -> str:
        if self.code:
            return f"{self.detail} (code={self.code})"
        return self.detail


_HTTP_MESSAGES = {
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed",
    status.HTTP_404_NOT_FOUND: "Not found",
}


def add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = _HTTP_MESSAGES.get(exc.status_code) or str(exc.detail) or "Error"
        response = error_response(message, exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Field-level detail stays in the server log.
        logger.warning(f"Rejected malformed request on {request.url.path}: {exc.errors()}")
        return error_response(MissingFieldsError.message, status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"Request to {request.url.path} failed: {exc}")
        return error_response(exc.message, exc.status_code)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return error_response(SERVER_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)
