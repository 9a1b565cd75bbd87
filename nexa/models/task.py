from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class TaskStatus(str, Enum):
    PENDIENTE = "pendiente"
    EN_PROGRESO = "en_progreso"
    COMPLETADA = "completada"
    APROBADA = "aprobada"


class TaskCreate(BaseModel):
    # Required, but checked in TaskService.create_task.
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDIENTE


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskUpdate(BaseModel):
    description: Optional[str] = Field(default=None, max_length=1000)
    assigned_to: Optional[str] = None

    @model_validator(mode="after")
    def require_one_field(self) -> "TaskUpdate":
        if not self.model_fields_set & {"description", "assigned_to"}:
            raise ValueError(
                "Debe proporcionar al menos un campo para actualizar (description o assigned_to)"
            )
        return self

    def to_changes(self) -> "TaskChanges":
        fields_set = self.model_fields_set
        return TaskChanges(
            has_description="description" in fields_set and self.description is not None,
            description=self.description,
            has_assigned_to="assigned_to" in fields_set,
            assigned_to=self.assigned_to,
        )


@dataclass(frozen=True)
class TaskChanges:
    """Partial task edit with explicit presence flags.

    ``assigned_to`` may be present and ``None``, which unassigns the task.
    """

    has_description: bool = False
    description: Optional[str] = None
    has_assigned_to: bool = False
    assigned_to: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.has_description or self.has_assigned_to)


class TaskRecord(BaseModel):
    id: str
    project_id: str
    description: str
    status: TaskStatus
    assigned_to: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    assigned_name: Optional[str] = None
    created_by_name: Optional[str] = None
    approved_by_name: Optional[str] = None


class TaskResponse(BaseModel):
    message: str
    task: TaskRecord
