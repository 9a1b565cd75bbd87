"""
Exception handlers that render every failure as ``{"message": ...}``.

Domain errors (``nexa.core.errors``) already carry their status code; request
body validation becomes a 400 and anything unexpected becomes a 500 whose
stack trace is only exposed outside production.
"""

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nexa.core.config import Settings
from nexa.core.errors import AppError


logger = logging.getLogger(__name__)


def _format_validation_errors(errors: list[dict[str, Any]]) -> str:
    messages = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        msg = str(error.get("msg", "")).removeprefix("Value error, ")
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return ", ".join(messages)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    content: dict[str, Any] = {"message": exc.detail}
    if isinstance(exc, AppError):
        if exc.errors is not None:
            content["errors"] = exc.errors
    elif exc.status_code == status.HTTP_404_NOT_FOUND:
        content["message"] = "Ruta no encontrada"
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": "Error de validación",
            "errors": _format_validation_errors(exc.errors()),
        },
    )


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content: dict[str, Any] = {"message": "Error interno del servidor"}
        if not settings.is_production:
            content["stack"] = "".join(traceback.format_exception(exc))
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
