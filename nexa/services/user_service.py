from __future__ import annotations

import logging
from typing import Any

from nexa.core.errors import InsufficientRole, NotFound, ValidationError
from nexa.core.rbac import Capability, missing_privilege_message, visible_user_roles
from nexa.core.security import hash_password
from nexa.models.auth import TokenPayload
from nexa.models.user import UserChanges, UserCreate, UserPublic
from nexa.repositories.base import Repository


logger = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "El nombre de usuario o email ya existe"


def to_user_public(row: dict[str, Any]) -> UserPublic:
    return UserPublic(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        role=row["role"],
        active=bool(row.get("active", True)),
        created_at=row.get("created_at"),
    )


class UserService:
    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    def list_users(self, caller: TokenPayload) -> list[UserPublic]:
        roles = visible_user_roles(caller.role)
        if roles is not None and not roles:
            raise InsufficientRole(missing_privilege_message(Capability.USERS_LIST))
        rows = self.repository.list_users(roles=roles)
        return [to_user_public(r) for r in rows]

    def create_user(self, payload: UserCreate) -> UserPublic:
        email = str(payload.email)
        if self.repository.find_user_by_username(payload.username) or self.repository.find_user_by_email(email):
            raise ValidationError(DUPLICATE_USER_MESSAGE)

        row = self.repository.add_user(
            {
                "username": payload.username,
                "email": email,
                "password_hash": hash_password(payload.password),
                "role": payload.role.value,
                "active": True,
            }
        )
        logger.info("Created user id=%s with role %s", row["id"], row["role"])
        return to_user_public(row)

    def update_user(self, user_id: str, changes: UserChanges) -> UserPublic:
        if changes.is_empty():
            raise ValidationError("No hay campos para actualizar")

        row = self.repository.find_user_by_id(user_id)
        if not row:
            raise NotFound("Usuario no encontrado")

        if changes.username is not None and changes.username != row["username"]:
            if self.repository.find_user_by_username(changes.username):
                raise ValidationError(DUPLICATE_USER_MESSAGE)
            row["username"] = changes.username
        if changes.email is not None and changes.email != row["email"]:
            if self.repository.find_user_by_email(changes.email):
                raise ValidationError(DUPLICATE_USER_MESSAGE)
            row["email"] = changes.email
        if changes.password is not None:
            row["password_hash"] = hash_password(changes.password)
        if changes.role is not None:
            row["role"] = changes.role.value
        if changes.active is not None:
            row["active"] = changes.active

        saved = self.repository.save_user(row)
        if not saved:
            raise NotFound("Usuario no encontrado")
        logger.info("Updated user id=%s", user_id)
        return to_user_public(saved)

    def set_active(self, user_id: str, active: bool) -> UserPublic:
        row = self.repository.find_user_by_id(user_id)
        if not row:
            raise NotFound("Usuario no encontrado")
        row["active"] = active
        saved = self.repository.save_user(row)
        if not saved:
            raise NotFound("Usuario no encontrado")
        logger.info("User id=%s active=%s", user_id, active)
        return to_user_public(saved)
