import logging
from collections.abc import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from nexa.core.errors import InsufficientRole, MissingToken
from nexa.core.rbac import Capability, has_capability, missing_privilege_message
from nexa.core.security import decode_access_token
from nexa.models.auth import TokenPayload
from nexa.services.container import ServiceContainer


logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    container: ServiceContainer = Depends(get_container),
) -> TokenPayload:
    if credentials is None or not credentials.credentials:
        raise MissingToken()

    # Raises InvalidToken / TokenExpired, both rendered as 403.
    user = decode_access_token(credentials.credentials, settings=container.settings)
    request.state.user = user
    return user


def require_capability(capability: Capability) -> Callable[..., TokenPayload]:
    def dependency(user: TokenPayload = Depends(get_current_user)) -> TokenPayload:
        if not has_capability(user.role, capability):
            logger.info(
                "Denied %s for user id=%s with role %s", capability.value, user.id, user.role.value
            )
            raise InsufficientRole(missing_privilege_message(capability))
        return user

    return dependency
