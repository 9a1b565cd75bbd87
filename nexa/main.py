import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from nexa.api.errors import register_exception_handlers
from nexa.api.routers.auth import router as auth_router
from nexa.api.routers.clients import router as clients_router
from nexa.api.routers.dashboard import router as dashboard_router
from nexa.api.routers.projects import router as projects_router
from nexa.api.routers.users import router as users_router
from nexa.core.config import Settings, settings as default_settings
from nexa.core.logging import configure_logging
from nexa.repositories.base import Repository
from nexa.services.container import build_container


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, repository: Repository | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.container.repository.close()

    app = FastAPI(
        title="NEXA-Sys API",
        version="1.0.0",
        description=(
            "Business management API for clients, projects and tasks with "
            "role-based access control and a Kanban task approval workflow."
        ),
        lifespan=lifespan,
    )
    app.state.container = build_container(settings, repository=repository)
    register_exception_handlers(app, settings)

    if not settings.is_production:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            logger.info("%s %s", request.method, request.url.path)
            return await call_next(request)

    @app.get("/")
    def root() -> dict[str, str]:
        return {"status": "ok", "service": settings.app_name}

    @app.get("/health")
    def health() -> dict[str, str]:
        return {
            "status": "ok",
            "database_mode": app.state.container.repository.backend_name,
        }

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(clients_router)
    app.include_router(projects_router)
    app.include_router(dashboard_router)

    logger.info(
        "%s ready (environment=%s, database_mode=%s)",
        settings.app_name,
        settings.environment,
        app.state.container.repository.backend_name,
    )
    return app


def run() -> None:
    import uvicorn

    uvicorn.run("nexa.main:create_app", factory=True, host=default_settings.host, port=default_settings.port)
