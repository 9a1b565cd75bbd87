from __future__ import annotations

from collections.abc import Iterable
from copy import deepcopy
from itertools import count
from threading import RLock

from nexa.core.rbac import Role
from nexa.models.fields import FieldScope
from nexa.repositories.base import Repository, Row, utcnow


class InMemoryRepository(Repository):
    """Process-local store used when no database is configured."""

    backend_name = "memory"

    def __init__(self) -> None:
        self.lock = RLock()
        self.users: dict[str, Row] = {}
        self.clients: dict[str, Row] = {}
        self.projects: dict[str, Row] = {}
        self.tasks: dict[str, Row] = {}
        self.field_definitions: dict[str, Row] = {}
        self._sequences = {
            "users": count(1),
            "clients": count(1),
            "projects": count(1),
            "tasks": count(1),
            "field_definitions": count(1),
        }

    def _insert(self, collection: str, row: Row) -> Row:
        table: dict[str, Row] = getattr(self, collection)
        with self.lock:
            record = deepcopy(row)
            record["id"] = str(next(self._sequences[collection]))
            record.setdefault("created_at", utcnow())
            table[record["id"]] = record
            return deepcopy(record)

    def _replace(self, collection: str, row: Row) -> Row | None:
        table: dict[str, Row] = getattr(self, collection)
        with self.lock:
            if row.get("id") not in table:
                return None
            table[row["id"]] = deepcopy(row)
            return deepcopy(row)

    def _get(self, collection: str, row_id: str) -> Row | None:
        table: dict[str, Row] = getattr(self, collection)
        with self.lock:
            row = table.get(str(row_id))
            return deepcopy(row) if row else None

    def _all(self, collection: str) -> list[Row]:
        table: dict[str, Row] = getattr(self, collection)
        with self.lock:
            return [deepcopy(r) for r in table.values()]

    # users
    def find_user_by_id(self, user_id: str) -> Row | None:
        return self._get("users", user_id)

    def find_user_by_username(self, username: str) -> Row | None:
        return next((u for u in self._all("users") if u["username"] == username), None)

    def find_user_by_email(self, email: str) -> Row | None:
        return next((u for u in self._all("users") if u["email"] == email), None)

    def list_users(self, roles: Iterable[Role] | None = None) -> list[Row]:
        rows = self._all("users")
        if roles is not None:
            wanted = {Role(r).value for r in roles}
            rows = [u for u in rows if u["role"] in wanted]
        # Ties on created_at fall back to the newest id.
        return sorted(rows, key=lambda u: (u["created_at"], int(u["id"])), reverse=True)

    def add_user(self, row: Row) -> Row:
        return self._insert("users", row)

    def save_user(self, row: Row) -> Row | None:
        return self._replace("users", row)

    # clients
    def list_clients(self, active_only: bool = False) -> list[Row]:
        rows = self._all("clients")
        if active_only:
            rows = [c for c in rows if c.get("active")]
        return sorted(rows, key=lambda c: (c["created_at"], int(c["id"])), reverse=True)

    def find_client(self, client_id: str) -> Row | None:
        return self._get("clients", client_id)

    def add_client(self, row: Row) -> Row:
        return self._insert("clients", row)

    def save_client(self, row: Row) -> Row | None:
        return self._replace("clients", row)

    # projects
    def list_projects(self, include_deleted: bool = False) -> list[Row]:
        rows = self._all("projects")
        if not include_deleted:
            rows = [p for p in rows if not p.get("deleted_at")]
        return sorted(rows, key=lambda p: (p["created_at"], int(p["id"])), reverse=True)

    def find_project(self, project_id: str) -> Row | None:
        return self._get("projects", project_id)

    def add_project(self, row: Row) -> Row:
        return self._insert("projects", row)

    def save_project(self, row: Row) -> Row | None:
        return self._replace("projects", row)

    # tasks
    def list_tasks(self, project_id: str | None = None) -> list[Row]:
        rows = self._all("tasks")
        if project_id is not None:
            rows = [t for t in rows if t["project_id"] == str(project_id)]
        return sorted(rows, key=lambda t: (t["created_at"], int(t["id"])))

    def find_task_by_id(self, task_id: str) -> Row | None:
        return self._get("tasks", task_id)

    def add_task(self, row: Row) -> Row:
        return self._insert("tasks", row)

    def save_task(self, row: Row) -> Row | None:
        return self._replace("tasks", row)

    # custom field definitions
    def list_field_definitions(self, scope: FieldScope, active_only: bool = False) -> list[Row]:
        rows = [f for f in self._all("field_definitions") if f["scope"] == FieldScope(scope).value]
        if active_only:
            rows = [f for f in rows if f.get("active")]
        return sorted(rows, key=lambda f: (f.get("sort_order") or 0, f["label"]))

    def find_field_definition(self, scope: FieldScope, field_id: str) -> Row | None:
        row = self._get("field_definitions", field_id)
        if row and row["scope"] == FieldScope(scope).value:
            return row
        return None

    def find_field_definition_by_name(self, scope: FieldScope, name: str) -> Row | None:
        return next(
            (f for f in self.list_field_definitions(scope) if f["name"] == name),
            None,
        )

    def add_field_definition(self, row: Row) -> Row:
        return self._insert("field_definitions", row)

    def save_field_definition(self, row: Row) -> Row | None:
        return self._replace("field_definitions", row)
