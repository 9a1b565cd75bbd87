from __future__ import annotations

import logging
from typing import Any

from nexa.core.config import Settings
from nexa.core.errors import AuthenticationFailed, NotFound
from nexa.core.security import create_access_token, verify_password
from nexa.models.auth import LoginResponse, TokenPayload, UserInfo
from nexa.models.user import UserPublic
from nexa.repositories.base import Repository
from nexa.services.user_service import to_user_public


logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, repository: Repository, settings: Settings) -> None:
        self.repository = repository
        self.settings = settings

    def authenticate(self, username: str, password: str) -> UserInfo:
        """Verify credentials; every failure looks the same to the caller."""
        user = self.repository.find_user_by_username(username)
        if not user or not user.get("active"):
            logger.info("Login rejected for unknown or inactive account")
            raise AuthenticationFailed()
        if not verify_password(password, user.get("password_hash", "")):
            logger.info("Login rejected for user id=%s: bad password", user["id"])
            raise AuthenticationFailed()
        return self.as_info(user)

    def issue_token(self, user: UserInfo) -> str:
        token, _ = create_access_token(user, settings=self.settings)
        return token

    def login(self, username: str, password: str) -> LoginResponse:
        user = self.authenticate(username, password)
        logger.info("User id=%s logged in as %s", user.id, user.role.value)
        return LoginResponse(token=self.issue_token(user), user_info=user)

    def current_profile(self, caller: TokenPayload) -> UserPublic:
        user = self.repository.find_user_by_id(caller.id)
        if not user:
            raise NotFound("Usuario no encontrado")
        return to_user_public(user)

    @staticmethod
    def as_info(user: dict[str, Any]) -> UserInfo:
        return UserInfo(
            id=user["id"],
            username=user["username"],
            email=user["email"],
            role=user["role"],
        )
