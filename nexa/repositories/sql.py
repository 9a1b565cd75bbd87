from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    insert,
    select,
    text,
    update,
)
from sqlalchemy.engine import Engine, RowMapping
from sqlalchemy.exc import NoResultFound
from sqlalchemy.pool import StaticPool

from nexa.core.rbac import Role
from nexa.models.fields import FieldScope
from nexa.repositories.base import Repository, Row, utcnow


logger = logging.getLogger(__name__)

metadata = MetaData()

users_table = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(100), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", String(20), nullable=False, default=Role.USER.value),
    Column("active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

clients_table = Table(
    "clients",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("contact_name", String(255), nullable=False, default=""),
    Column("industry", String(100), nullable=False, default=""),
    Column("email", String(255), nullable=False),
    Column("phone", String(50), nullable=False, default=""),
    Column("notes", Text, nullable=False, default=""),
    Column("projects", JSON, nullable=False, default=list),
    Column("active", Boolean, nullable=False, default=True),
    Column("custom_data", JSON, nullable=False, default=dict),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=True),
)

projects_table = Table(
    "projects",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("client_id", Integer, ForeignKey("clients.id"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("status", String(20), nullable=False),
    Column("start_date", Date, nullable=True),
    Column("end_date", Date, nullable=True),
    Column("responsible_id", Integer, ForeignKey("users.id"), nullable=True),
    Column("budget", Float, nullable=True),
    Column("priority", String(10), nullable=False, default="medium"),
    Column("progress_percentage", Integer, nullable=False, default=0),
    Column("custom_data", JSON, nullable=False, default=dict),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=True),
    Column("deleted_at", DateTime(timezone=True), nullable=True),
)

tasks_table = Table(
    "project_tasks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("project_id", Integer, ForeignKey("projects.id"), nullable=False),
    Column("description", Text, nullable=False),
    Column("status", String(20), nullable=False),
    Column("assigned_to", Integer, ForeignKey("users.id"), nullable=True),
    Column("created_by", Integer, ForeignKey("users.id"), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=True),
    Column("approved_by", Integer, ForeignKey("users.id"), nullable=True),
    Column("approved_at", DateTime(timezone=True), nullable=True),
)

field_definitions_table = Table(
    "field_definitions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("scope", String(20), nullable=False),
    Column("name", String(100), nullable=False),
    Column("label", String(255), nullable=False),
    Column("type", String(20), nullable=False),
    Column("category", String(100), nullable=False, default="General"),
    Column("is_required", Boolean, nullable=False, default=False),
    Column("sort_order", Integer, nullable=False, default=0),
    Column("options", JSON, nullable=True),
    Column("active", Boolean, nullable=False, default=True),
    UniqueConstraint("scope", "name", name="uq_field_definitions_scope_name"),
)

# Integer columns exposed as string ids.
_ID_COLUMNS = {
    "id",
    "client_id",
    "responsible_id",
    "project_id",
    "assigned_to",
    "created_by",
    "approved_by",
}


def normalize_database_url(url: str) -> str:
    if url.startswith("postgres://"):
        return "postgresql+psycopg://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://"):]
    return url


def create_sql_engine(url: str) -> Engine:
    url = normalize_database_url(url)
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url in {"sqlite://", "sqlite:///:memory:"} or "mode=memory" in url:
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


def _db_id(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_row(mapping: RowMapping) -> Row:
    row: Row = {}
    for key, value in mapping.items():
        if key in _ID_COLUMNS:
            row[key] = str(value) if value is not None else None
        elif isinstance(value, datetime):
            row[key] = _as_utc(value)
        else:
            row[key] = value
    return row


class SqlRepository(Repository):
    """Relational store backed by a SQLAlchemy engine."""

    backend_name = "sql"

    def __init__(self, engine: Engine, create_schema: bool = True) -> None:
        self.engine = engine
        if create_schema:
            metadata.create_all(engine)

    @classmethod
    def from_url(cls, url: str) -> "SqlRepository":
        return cls(create_sql_engine(url))

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def close(self) -> None:
        self.engine.dispose()

    def _values(self, table: Table, row: Row) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for column in table.columns:
            if column.name == "id" or column.name not in row:
                continue
            value = row[column.name]
            if column.name in _ID_COLUMNS:
                value = _db_id(value)
            values[column.name] = value
        return values

    def _fetch_one(self, statement) -> Row | None:
        with self.engine.connect() as conn:
            result = conn.execute(statement).mappings().first()
        return _to_row(result) if result else None

    def _fetch_all(self, statement) -> list[Row]:
        with self.engine.connect() as conn:
            result = conn.execute(statement).mappings().all()
        return [_to_row(r) for r in result]

    def _insert(self, table: Table, row: Row) -> Row:
        values = self._values(table, row)
        if "created_at" in table.c and values.get("created_at") is None:
            values["created_at"] = utcnow()
        with self.engine.begin() as conn:
            result = conn.execute(insert(table).values(**values))
            new_id = result.inserted_primary_key[0]
        stored = self._fetch_one(select(table).where(table.c.id == new_id))
        if stored is None:
            raise NoResultFound(f"Inserted {table.name} row id={new_id} could not be read back")
        return stored

    def _replace(self, table: Table, row: Row) -> Row | None:
        row_id = _db_id(row.get("id"))
        if row_id is None:
            return None
        with self.engine.begin() as conn:
            result = conn.execute(
                update(table).where(table.c.id == row_id).values(**self._values(table, row))
            )
            if result.rowcount == 0:
                return None
        return self._fetch_one(select(table).where(table.c.id == row_id))

    def _get(self, table: Table, row_id: str) -> Row | None:
        db_id = _db_id(row_id)
        if db_id is None:
            return None
        return self._fetch_one(select(table).where(table.c.id == db_id))

    # users
    def find_user_by_id(self, user_id: str) -> Row | None:
        return self._get(users_table, user_id)

    def find_user_by_username(self, username: str) -> Row | None:
        return self._fetch_one(select(users_table).where(users_table.c.username == username))

    def find_user_by_email(self, email: str) -> Row | None:
        return self._fetch_one(select(users_table).where(users_table.c.email == email))

    def list_users(self, roles: Iterable[Role] | None = None) -> list[Row]:
        statement = select(users_table)
        if roles is not None:
            statement = statement.where(users_table.c.role.in_([Role(r).value for r in roles]))
        statement = statement.order_by(users_table.c.created_at.desc(), users_table.c.id.desc())
        return self._fetch_all(statement)

    def add_user(self, row: Row) -> Row:
        return self._insert(users_table, row)

    def save_user(self, row: Row) -> Row | None:
        return self._replace(users_table, row)

    # clients
    def list_clients(self, active_only: bool = False) -> list[Row]:
        statement = select(clients_table)
        if active_only:
            statement = statement.where(clients_table.c.active.is_(True))
        statement = statement.order_by(clients_table.c.created_at.desc(), clients_table.c.id.desc())
        return self._fetch_all(statement)

    def find_client(self, client_id: str) -> Row | None:
        return self._get(clients_table, client_id)

    def add_client(self, row: Row) -> Row:
        return self._insert(clients_table, row)

    def save_client(self, row: Row) -> Row | None:
        return self._replace(clients_table, row)

    # projects
    def list_projects(self, include_deleted: bool = False) -> list[Row]:
        statement = select(projects_table)
        if not include_deleted:
            statement = statement.where(projects_table.c.deleted_at.is_(None))
        statement = statement.order_by(projects_table.c.created_at.desc(), projects_table.c.id.desc())
        return self._fetch_all(statement)

    def find_project(self, project_id: str) -> Row | None:
        return self._get(projects_table, project_id)

    def add_project(self, row: Row) -> Row:
        return self._insert(projects_table, row)

    def save_project(self, row: Row) -> Row | None:
        return self._replace(projects_table, row)

    # tasks
    def list_tasks(self, project_id: str | None = None) -> list[Row]:
        statement = select(tasks_table)
        if project_id is not None:
            db_id = _db_id(project_id)
            if db_id is None:
                return []
            statement = statement.where(tasks_table.c.project_id == db_id)
        statement = statement.order_by(tasks_table.c.created_at.asc(), tasks_table.c.id.asc())
        return self._fetch_all(statement)

    def find_task_by_id(self, task_id: str) -> Row | None:
        return self._get(tasks_table, task_id)

    def add_task(self, row: Row) -> Row:
        return self._insert(tasks_table, row)

    def save_task(self, row: Row) -> Row | None:
        return self._replace(tasks_table, row)

    # custom field definitions
    def list_field_definitions(self, scope: FieldScope, active_only: bool = False) -> list[Row]:
        table = field_definitions_table
        statement = select(table).where(table.c.scope == FieldScope(scope).value)
        if active_only:
            statement = statement.where(table.c.active.is_(True))
        statement = statement.order_by(table.c.sort_order.asc(), table.c.label.asc())
        return self._fetch_all(statement)

    def find_field_definition(self, scope: FieldScope, field_id: str) -> Row | None:
        row = self._get(field_definitions_table, field_id)
        if row and row["scope"] == FieldScope(scope).value:
            return row
        return None

    def find_field_definition_by_name(self, scope: FieldScope, name: str) -> Row | None:
        table = field_definitions_table
        return self._fetch_one(
            select(table).where(table.c.scope == FieldScope(scope).value, table.c.name == name)
        )

    def add_field_definition(self, row: Row) -> Row:
        return self._insert(field_definitions_table, row)

    def save_field_definition(self, row: Row) -> Row | None:
        return self._replace(field_definitions_table, row)
