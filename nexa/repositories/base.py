from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from nexa.core.rbac import Role
from nexa.models.fields import FieldScope


Row = dict[str, Any]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Repository(ABC):
    """Persistence contract shared by the in-memory and relational stores.

    Records travel as plain dicts with string ids. ``add_*`` assigns the id
    (and ``created_at`` when missing) and returns the stored row; ``save_*``
    overwrites an existing row by id and returns it, or ``None`` when the id
    is unknown. Reads return copies, so callers mutate and save explicitly.
    """

    backend_name: str = "abstract"

    # users
    @abstractmethod
    def find_user_by_id(self, user_id: str) -> Row | None: ...

    @abstractmethod
    def find_user_by_username(self, username: str) -> Row | None: ...

    @abstractmethod
    def find_user_by_email(self, email: str) -> Row | None: ...

    @abstractmethod
    def list_users(self, roles: Iterable[Role] | None = None) -> list[Row]:
        """Newest first; ``roles`` restricts the result to those roles."""

    @abstractmethod
    def add_user(self, row: Row) -> Row: ...

    @abstractmethod
    def save_user(self, row: Row) -> Row | None: ...

    # clients
    @abstractmethod
    def list_clients(self, active_only: bool = False) -> list[Row]: ...

    @abstractmethod
    def find_client(self, client_id: str) -> Row | None: ...

    @abstractmethod
    def add_client(self, row: Row) -> Row: ...

    @abstractmethod
    def save_client(self, row: Row) -> Row | None: ...

    # projects
    @abstractmethod
    def list_projects(self, include_deleted: bool = False) -> list[Row]: ...

    @abstractmethod
    def find_project(self, project_id: str) -> Row | None: ...

    @abstractmethod
    def add_project(self, row: Row) -> Row: ...

    @abstractmethod
    def save_project(self, row: Row) -> Row | None: ...

    # tasks
    @abstractmethod
    def list_tasks(self, project_id: str | None = None) -> list[Row]:
        """Oldest first."""

    @abstractmethod
    def find_task_by_id(self, task_id: str) -> Row | None: ...

    @abstractmethod
    def add_task(self, row: Row) -> Row: ...

    @abstractmethod
    def save_task(self, row: Row) -> Row | None: ...

    # custom field definitions
    @abstractmethod
    def list_field_definitions(self, scope: FieldScope, active_only: bool = False) -> list[Row]:
        """Ordered by ``sort_order`` then ``label``."""

    @abstractmethod
    def find_field_definition(self, scope: FieldScope, field_id: str) -> Row | None: ...

    @abstractmethod
    def find_field_definition_by_name(self, scope: FieldScope, name: str) -> Row | None: ...

    @abstractmethod
    def add_field_definition(self, row: Row) -> Row: ...

    @abstractmethod
    def save_field_definition(self, row: Row) -> Row | None: ...

    def has_users(self) -> bool:
        return bool(self.list_users())

    def close(self) -> None:
        return None
