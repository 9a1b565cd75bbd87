from datetime import timedelta

import pytest
from sqlalchemy.exc import NoResultFound

from nexa.core.config import Settings
from nexa.core.rbac import Role
from nexa.models.fields import FieldScope
from nexa.repositories.base import utcnow
from nexa.repositories.factory import build_repository
from nexa.repositories.memory import InMemoryRepository
from nexa.repositories.seed import seed_repository
from nexa.repositories.sql import SqlRepository, create_sql_engine, normalize_database_url


def _user(username, role=Role.USER, **extra):
    return {
        "username": username,
        "email": f"{username}@nexa-sys.com",
        "password_hash": "hash",
        "role": role.value,
        "active": True,
        **extra,
    }


def test_add_user_assigns_string_ids(repository):
    first = repository.add_user(_user("alice"))
    second = repository.add_user(_user("bob"))

    assert isinstance(first["id"], str)
    assert first["id"] != second["id"]
    assert first["created_at"] is not None
    assert repository.find_user_by_id(first["id"])["username"] == "alice"
    assert repository.find_user_by_username("bob")["id"] == second["id"]
    assert repository.find_user_by_email("alice@nexa-sys.com")["id"] == first["id"]


def test_unknown_or_malformed_ids_are_not_found(repository):
    assert repository.find_user_by_id("999") is None
    assert repository.find_user_by_id("not-an-id") is None
    assert repository.find_task_by_id("abc") is None
    assert repository.save_user({**_user("ghost"), "id": "999"}) is None


def test_list_users_newest_first_with_role_filter(repository):
    now = utcnow()
    repository.add_user(_user("old", Role.MANAGER, created_at=now - timedelta(days=2)))
    repository.add_user(_user("mid", Role.USER, created_at=now - timedelta(days=1)))
    repository.add_user(_user("new", Role.USER, created_at=now))

    assert [u["username"] for u in repository.list_users()] == ["new", "mid", "old"]
    assert [u["username"] for u in repository.list_users(roles=[Role.USER])] == ["new", "mid"]
    assert repository.list_users(roles=[]) == []


def test_reads_return_copies(repository):
    stored = repository.add_user(_user("carol"))

    loaded = repository.find_user_by_id(stored["id"])
    loaded["username"] = "mallory"

    assert repository.find_user_by_id(stored["id"])["username"] == "carol"


def test_save_user_overwrites_fields(repository):
    stored = repository.add_user(_user("dave"))
    stored["active"] = False
    stored["role"] = Role.MANAGER.value

    saved = repository.save_user(stored)

    assert saved["active"] is False
    assert repository.find_user_by_id(stored["id"])["role"] == "manager"


def test_tasks_are_listed_oldest_first_per_project(seeded_repository):
    repo = seeded_repository
    project_id = repo.list_projects()[0]["id"]
    admin = repo.find_user_by_username("admin")
    later = repo.add_task(
        {
            "project_id": project_id,
            "description": "Documentar la migración",
            "status": "pendiente",
            "assigned_to": admin["id"],
            "created_by": admin["id"],
        }
    )

    tasks = repo.list_tasks(project_id)

    assert [t["id"] for t in tasks][-1] == later["id"]
    assert all(t["project_id"] == project_id for t in tasks)
    assert repo.list_tasks("404") == []


def test_task_save_keeps_nullable_assignee(seeded_repository):
    repo = seeded_repository
    task = repo.list_tasks()[0]
    task["assigned_to"] = None

    repo.save_task(task)

    assert repo.find_task_by_id(task["id"])["assigned_to"] is None


def test_clients_active_filter(seeded_repository):
    names = {c["name"] for c in seeded_repository.list_clients()}
    active = {c["name"] for c in seeded_repository.list_clients(active_only=True)}

    assert names == {"Innovatech S.A.", "Grupo Retail MX"}
    assert active == {"Innovatech S.A."}


def test_soft_deleted_projects_are_hidden(seeded_repository):
    repo = seeded_repository
    project = repo.list_projects()[0]
    project["deleted_at"] = utcnow()
    repo.save_project(project)

    assert repo.list_projects() == []
    assert len(repo.list_projects(include_deleted=True)) == 1


def test_field_definitions_are_scoped_and_ordered(seeded_repository):
    repo = seeded_repository

    project_fields = repo.list_field_definitions(FieldScope.PROJECT)
    client_fields = repo.list_field_definitions(FieldScope.CLIENT)

    assert [f["name"] for f in project_fields] == [
        "repo_url",
        "tech_stack",
        "sprint_actual",
        "budget_approved",
    ]
    assert [f["name"] for f in client_fields] == ["rfc", "anniversary_date"]
    assert project_fields[1]["options"] == ["React", "Vue", "Angular", "Node.js"]
    rfc = client_fields[0]
    assert repo.find_field_definition(FieldScope.PROJECT, rfc["id"]) is None
    assert repo.find_field_definition_by_name(FieldScope.CLIENT, "rfc")["id"] == rfc["id"]


def test_seed_runs_once(repository):
    assert seed_repository(repository) is True
    assert seed_repository(repository) is False
    assert len(repository.list_users()) == 3


def test_seeded_accounts_and_tasks(seeded_repository):
    repo = seeded_repository
    roles = {u["username"]: u["role"] for u in repo.list_users()}
    tasks = repo.list_tasks()

    assert roles == {"admin": "admin", "manager": "manager", "user": "user"}
    assert [t["status"] for t in tasks] == ["completada", "en_progreso"]
    assert all(t["approved_by"] is None for t in tasks)


def test_normalize_database_url():
    assert normalize_database_url("postgres://u:p@db/nexa") == "postgresql+psycopg://u:p@db/nexa"
    assert normalize_database_url("postgresql://u:p@db/nexa") == "postgresql+psycopg://u:p@db/nexa"
    assert normalize_database_url("sqlite://") == "sqlite://"


def test_build_repository_defaults_to_memory(tmp_path):
    repo = build_repository(Settings(database_url="", data_dir=tmp_path))

    assert isinstance(repo, InMemoryRepository)


def test_build_repository_uses_sql_when_reachable(tmp_path):
    repo = build_repository(Settings(database_url=f"sqlite:///{tmp_path / 'nexa.db'}", data_dir=tmp_path))
    try:
        assert isinstance(repo, SqlRepository)
        assert repo.backend_name == "sql"
    finally:
        repo.close()


def test_build_repository_falls_back_when_database_is_unreachable(tmp_path):
    missing = tmp_path / "missing-dir" / "nexa.db"

    repo = build_repository(Settings(database_url=f"sqlite:///{missing}", data_dir=tmp_path))

    assert isinstance(repo, InMemoryRepository)


def test_sql_insert_raises_when_row_cannot_be_read_back(monkeypatch):
    repo = SqlRepository(create_sql_engine("sqlite://"))
    monkeypatch.setattr(repo, "_fetch_one", lambda statement: None)
    try:
        with pytest.raises(NoResultFound):
            repo.add_user(_user("erin"))
    finally:
        repo.close()
