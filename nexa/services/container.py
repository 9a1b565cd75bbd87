from dataclasses import dataclass

from nexa.core.config import Settings
from nexa.repositories.base import Repository
from nexa.repositories.factory import build_repository
from nexa.repositories.seed import seed_repository
from nexa.services.auth_service import AuthService
from nexa.services.client_service import ClientService
from nexa.services.dashboard_service import DashboardService
from nexa.services.field_service import FieldService
from nexa.services.project_service import ProjectService
from nexa.services.task_service import TaskService
from nexa.services.user_service import UserService


@dataclass
class ServiceContainer:
    settings: Settings
    repository: Repository
    auth_service: AuthService
    user_service: UserService
    field_service: FieldService
    client_service: ClientService
    task_service: TaskService
    project_service: ProjectService
    dashboard_service: DashboardService


def build_container(settings: Settings, repository: Repository | None = None) -> ServiceContainer:
    repository = repository or build_repository(settings)
    if settings.seed_data:
        seed_repository(repository)

    field_service = FieldService(repository=repository)
    task_service = TaskService(repository=repository)

    return ServiceContainer(
        settings=settings,
        repository=repository,
        auth_service=AuthService(repository=repository, settings=settings),
        user_service=UserService(repository=repository),
        field_service=field_service,
        client_service=ClientService(repository=repository, field_service=field_service),
        task_service=task_service,
        project_service=ProjectService(
            repository=repository,
            task_service=task_service,
            field_service=field_service,
        ),
        dashboard_service=DashboardService(repository=repository),
    )
