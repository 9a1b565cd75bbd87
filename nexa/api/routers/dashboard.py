from fastapi import APIRouter, Depends

from nexa.api.deps import get_container, require_capability
from nexa.core.rbac import Capability
from nexa.models.auth import TokenPayload
from nexa.models.common import DashboardStats
from nexa.services.container import ServiceContainer


router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
def get_stats(
    current_user: TokenPayload = Depends(require_capability(Capability.DASHBOARD_READ)),
    container: ServiceContainer = Depends(get_container),
) -> DashboardStats:
    _ = current_user
    return container.dashboard_service.get_stats()
