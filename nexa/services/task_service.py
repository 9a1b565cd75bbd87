from __future__ import annotations

import logging
from typing import Any, Optional

from nexa.core.errors import InsufficientRole, NotFound, TaskApprovalDenied, ValidationError
from nexa.core.rbac import Capability, has_capability, missing_privilege_message
from nexa.models.auth import TokenPayload
from nexa.models.task import TaskChanges, TaskRecord, TaskStatus
from nexa.repositories.base import Repository, utcnow


logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Tarea no encontrada"


class TaskService:
    """Owns the task status lifecycle and the approval gate.

    ``pendiente -> en_progreso -> completada -> aprobada``. Any authenticated
    caller may move a task to any status, except that entering ``aprobada``
    requires an approver role. Approval stamps are written when a task enters
    ``aprobada`` and are left in place by later transitions.

    Writes are plain read-modify-write against the repository; concurrent
    edits of the same task are last-write-wins.
    """

    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    @staticmethod
    def can_approve(caller: TokenPayload) -> bool:
        return has_capability(caller.role, Capability.TASKS_APPROVE)

    def _ensure_can_approve(self, caller: TokenPayload) -> None:
        if not self.can_approve(caller):
            logger.warning(
                "Approval denied for user id=%s with role %s", caller.id, caller.role.value
            )
            raise TaskApprovalDenied()

    def _require_assignee(self, assigned_to: str) -> None:
        if not self.repository.find_user_by_id(assigned_to):
            raise ValidationError("El usuario asignado no existe")

    def create_task(
        self,
        caller: TokenPayload,
        project_id: str,
        description: Optional[str],
        assigned_to: Optional[str],
        status: TaskStatus = TaskStatus.PENDIENTE,
    ) -> TaskRecord:
        if not description or not description.strip():
            raise ValidationError("La descripción de la tarea es requerida")
        if not assigned_to:
            raise ValidationError("Debe asignar la tarea a un usuario")

        status = TaskStatus(status)
        if status == TaskStatus.APROBADA:
            self._ensure_can_approve(caller)

        project = self.repository.find_project(project_id)
        if not project or project.get("deleted_at"):
            raise NotFound("Proyecto no encontrado")
        self._require_assignee(assigned_to)

        now = utcnow()
        approved = status == TaskStatus.APROBADA
        row = self.repository.add_task(
            {
                "project_id": str(project_id),
                "description": description,
                "status": status.value,
                "assigned_to": assigned_to,
                "created_by": caller.id,
                "created_at": now,
                "updated_at": now,
                "approved_by": caller.id if approved else None,
                "approved_at": now if approved else None,
            }
        )
        logger.info(
            "Task id=%s created in project id=%s by user id=%s", row["id"], project_id, caller.id
        )
        return self._to_task_model(row)

    def set_status(self, task_id: str, new_status: TaskStatus, caller: TokenPayload) -> TaskRecord:
        new_status = TaskStatus(new_status)
        # Gate runs before the lookup: a denied approval is a 403 even for unknown ids.
        if new_status == TaskStatus.APROBADA:
            self._ensure_can_approve(caller)

        row = self.repository.find_task_by_id(task_id)
        if not row:
            raise NotFound(TASK_NOT_FOUND)

        previous = row["status"]
        now = utcnow()
        row["status"] = new_status.value
        row["updated_at"] = now
        if new_status == TaskStatus.APROBADA:
            row["approved_by"] = caller.id
            row["approved_at"] = now

        saved = self.repository.save_task(row)
        if not saved:
            raise NotFound(TASK_NOT_FOUND)

        logger.info(
            "Task id=%s status %s -> %s by user id=%s",
            task_id,
            previous,
            new_status.value,
            caller.id,
        )
        return self._enrich(saved)

    def update_fields(self, task_id: str, changes: TaskChanges, caller: TokenPayload) -> TaskRecord:
        if not has_capability(caller.role, Capability.TASKS_UPDATE):
            raise InsufficientRole(missing_privilege_message(Capability.TASKS_UPDATE))
        if changes.is_empty():
            raise ValidationError(
                "Error de validación",
                errors="Debe proporcionar al menos un campo para actualizar (description o assigned_to)",
            )

        row = self.repository.find_task_by_id(task_id)
        if not row:
            raise NotFound(TASK_NOT_FOUND)

        if changes.has_description:
            row["description"] = changes.description
        if changes.has_assigned_to:
            if changes.assigned_to is not None:
                self._require_assignee(changes.assigned_to)
            row["assigned_to"] = changes.assigned_to
        row["updated_at"] = utcnow()

        saved = self.repository.save_task(row)
        if not saved:
            raise NotFound(TASK_NOT_FOUND)

        logger.info("Task id=%s edited by user id=%s", task_id, caller.id)
        return self._enrich(saved)

    def get_task(self, task_id: str) -> TaskRecord:
        row = self.repository.find_task_by_id(task_id)
        if not row:
            raise NotFound(TASK_NOT_FOUND)
        return self._enrich(row)

    def list_tasks(self, project_id: str) -> list[TaskRecord]:
        names: dict[str, Optional[str]] = {}
        return [self._enrich(r, names) for r in self.repository.list_tasks(project_id)]

    def _username(self, user_id: Optional[str], cache: dict[str, Optional[str]]) -> Optional[str]:
        if not user_id:
            return None
        if user_id not in cache:
            user = self.repository.find_user_by_id(user_id)
            cache[user_id] = user["username"] if user else None
        return cache[user_id]

    def _enrich(self, row: dict[str, Any], cache: dict[str, Optional[str]] | None = None) -> TaskRecord:
        cache = {} if cache is None else cache
        return self._to_task_model(
            row,
            assigned_name=self._username(row.get("assigned_to"), cache),
            created_by_name=self._username(row.get("created_by"), cache),
            approved_by_name=self._username(row.get("approved_by"), cache),
        )

    @staticmethod
    def _to_task_model(row: dict[str, Any], **names: Optional[str]) -> TaskRecord:
        return TaskRecord(
            id=row["id"],
            project_id=row["project_id"],
            description=row["description"],
            status=row["status"],
            assigned_to=row.get("assigned_to"),
            created_by=row.get("created_by"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            approved_by=row.get("approved_by"),
            approved_at=row.get("approved_at"),
            **names,
        )
