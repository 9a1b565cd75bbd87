from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base for domain errors raised from services and guards.

    Each subclass pins the HTTP status it maps to, so handlers only need to
    render ``detail`` as the ``message`` field of the response body.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Error interno del servidor"

    def __init__(
        self,
        message: str | None = None,
        errors: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            status_code=type(self).status_code,
            detail=message or self.default_message,
            headers=headers,
        )
        self.errors = errors

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Error de validación"


class AuthenticationFailed(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Credenciales inválidas"


class MissingToken(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token no proporcionado"


class InvalidToken(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Token inválido o expirado"


class TokenExpired(InvalidToken):
    pass


class InsufficientRole(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Acceso denegado"


class TaskApprovalDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Solo Admin/Manager puede aprobar tareas"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Recurso no encontrado"
