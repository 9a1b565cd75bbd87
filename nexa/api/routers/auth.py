from fastapi import APIRouter, Depends

from nexa.api.deps import get_container, get_current_user
from nexa.models.auth import LoginRequest, LoginResponse, TokenPayload
from nexa.models.user import UserPublic
from nexa.services.container import ServiceContainer


router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    container: ServiceContainer = Depends(get_container),
) -> LoginResponse:
    return container.auth_service.login(payload.user, payload.password)


@router.get("/me", response_model=UserPublic)
def read_me(
    current_user: TokenPayload = Depends(get_current_user),
    container: ServiceContainer = Depends(get_container),
) -> UserPublic:
    return container.auth_service.current_profile(current_user)
