from collections.abc import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from nexa.core.config import Settings
from nexa.core.security import create_access_token
from nexa.main import create_app
from nexa.models.auth import TokenPayload
from nexa.repositories.base import Repository
from nexa.repositories.memory import InMemoryRepository
from nexa.repositories.seed import seed_repository
from nexa.repositories.sql import SqlRepository, create_sql_engine
from nexa.services.auth_service import AuthService
from nexa.services.container import ServiceContainer


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        secret_key="test-secret",
        database_url="",
        seed_data=True,
        data_dir=tmp_path,
    )


@pytest.fixture(params=["memory", "sql"])
def repository(request) -> Iterator[Repository]:
    if request.param == "memory":
        repo: Repository = InMemoryRepository()
    else:
        repo = SqlRepository(create_sql_engine("sqlite://"))
    yield repo
    repo.close()


@pytest.fixture
def seeded_repository(repository: Repository) -> Repository:
    seed_repository(repository)
    return repository


@pytest.fixture
def app(settings: Settings, repository: Repository) -> FastAPI:
    return create_app(settings, repository=repository)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def container(app: FastAPI) -> ServiceContainer:
    return app.state.container


@pytest.fixture
def auth_headers(container: ServiceContainer) -> Callable[[str], dict[str, str]]:
    """Bearer headers for a seeded account, minted without a bcrypt login."""

    def build(username: str = "admin") -> dict[str, str]:
        user = container.repository.find_user_by_username(username)
        assert user is not None, username
        token, _ = create_access_token(AuthService.as_info(user), settings=container.settings)
        return {"Authorization": f"Bearer {token}"}

    return build


def caller_for(repository: Repository, username: str) -> TokenPayload:
    user = repository.find_user_by_username(username)
    assert user is not None, username
    return TokenPayload(id=user["id"], username=user["username"], role=user["role"])


@pytest.fixture
def admin(seeded_repository: Repository) -> TokenPayload:
    return caller_for(seeded_repository, "admin")


@pytest.fixture
def manager(seeded_repository: Repository) -> TokenPayload:
    return caller_for(seeded_repository, "manager")


@pytest.fixture
def plain_user(seeded_repository: Repository) -> TokenPayload:
    return caller_for(seeded_repository, "user")
