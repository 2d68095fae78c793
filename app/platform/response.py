from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def ok_response(status_code: int = status.HTTP_200_OK, **data: Any) -> JSONResponse:
    """
    Success body shared by every endpoint: {"ok": true, ...extra fields}.
    """
    content = {"ok": True}
    content.update(jsonable_encoder(data))
    return JSONResponse(status_code=status_code, content=content)


def error_response(message: str, status_code: int) -> JSONResponse:
    """
    Error body shared by every endpoint: {"error": message}.
    Callers pass a fixed, user-facing message; never an exception string.
    """
    return JSONResponse(status_code=status_code, content={"error": message})
