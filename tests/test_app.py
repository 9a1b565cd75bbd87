import importlib
import logging
from dataclasses import replace
from logging.handlers import RotatingFileHandler

from fastapi import APIRouter
from fastapi.testclient import TestClient

from nexa.core.logging import configure_logging
from nexa.main import create_app
from nexa.repositories.memory import InMemoryRepository


def test_root_and_health(client, repository):
    assert client.get("/").json() == {"status": "ok", "service": "NEXA-Sys"}

    health = client.get("/health").json()
    assert health == {"status": "ok", "database_mode": repository.backend_name}


def test_unknown_route_uses_message_envelope(client):
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"message": "Ruta no encontrada"}


def _app_with_failing_route(settings):
    app = create_app(settings, repository=InMemoryRepository())
    router = APIRouter()

    @router.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    app.include_router(router)
    return app


def test_unhandled_errors_include_stack_outside_production(settings):
    client = TestClient(_app_with_failing_route(settings), raise_server_exceptions=False)

    response = client.get("/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "Error interno del servidor"
    assert "kaboom" in body["stack"]


def test_unhandled_errors_hide_stack_in_production(settings):
    production = replace(settings, environment="production")
    client = TestClient(_app_with_failing_route(production), raise_server_exceptions=False)

    response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"message": "Error interno del servidor"}


def test_importing_main_does_not_build_an_app():
    module = importlib.import_module("nexa.main")

    assert not hasattr(module, "app")


def test_log_file_goes_to_configured_data_dir(settings, monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)

    configure_logging(settings)
    try:
        files = [h.baseFilename for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert files == [str(settings.data_dir / "nexa.log")]
    finally:
        for handler in root.handlers:
            handler.close()
