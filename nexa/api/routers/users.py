from fastapi import APIRouter, Depends, status

from nexa.api.deps import get_container, require_capability
from nexa.core.rbac import Capability
from nexa.models.auth import TokenPayload
from nexa.models.common import CreatedResponse, MessageResponse
from nexa.models.user import UserCreate, UserPublic, UserStatusUpdate, UserUpdate
from nexa.services.container import ServiceContainer


router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=list[UserPublic])
def list_users(
    current_user: TokenPayload = Depends(require_capability(Capability.USERS_LIST)),
    container: ServiceContainer = Depends(get_container),
) -> list[UserPublic]:
    return container.user_service.list_users(current_user)


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    current_user: TokenPayload = Depends(require_capability(Capability.USERS_CREATE)),
    container: ServiceContainer = Depends(get_container),
) -> CreatedResponse:
    _ = current_user
    user = container.user_service.create_user(payload)
    return CreatedResponse(id=user.id, message="Usuario creado exitosamente")


@router.put("/{user_id}", response_model=MessageResponse)
def update_user(
    user_id: str,
    payload: UserUpdate,
    current_user: TokenPayload = Depends(require_capability(Capability.USERS_UPDATE)),
    container: ServiceContainer = Depends(get_container),
) -> MessageResponse:
    _ = current_user
    container.user_service.update_user(user_id, payload.to_changes())
    return MessageResponse(message="Usuario actualizado exitosamente")


@router.patch("/{user_id}/status", response_model=MessageResponse)
def update_user_status(
    user_id: str,
    payload: UserStatusUpdate,
    current_user: TokenPayload = Depends(require_capability(Capability.USERS_STATUS)),
    container: ServiceContainer = Depends(get_container),
) -> MessageResponse:
    _ = current_user
    container.user_service.set_active(user_id, payload.active)
    return MessageResponse(message="Estado de usuario actualizado exitosamente")
