from __future__ import annotations

import logging
from typing import Any, Optional

from nexa.core.errors import NotFound, ValidationError
from nexa.models.auth import TokenPayload
from nexa.models.fields import FieldScope
from nexa.models.project import ProjectCreate, ProjectRecord, ProjectUpdate
from nexa.repositories.base import Repository, utcnow
from nexa.services.field_service import FieldService
from nexa.services.task_service import TaskService


logger = logging.getLogger(__name__)

PROJECT_NOT_FOUND = "Proyecto no encontrado"


class ProjectService:
    def __init__(
        self,
        repository: Repository,
        task_service: TaskService,
        field_service: FieldService,
    ) -> None:
        self.repository = repository
        self.task_service = task_service
        self.field_service = field_service

    def list_projects(self) -> list[ProjectRecord]:
        return [self._to_project_model(r) for r in self.repository.list_projects()]

    def get_project(self, project_id: str) -> ProjectRecord:
        row = self.repository.find_project(project_id)
        if not row or row.get("deleted_at"):
            raise NotFound(PROJECT_NOT_FOUND)
        return self._to_project_model(row)

    def create_project(self, caller: TokenPayload, payload: ProjectCreate) -> ProjectRecord:
        self._check_references(payload.client_id, payload.responsible_id)
        now = utcnow()
        row = self.repository.add_project(
            {
                "client_id": payload.client_id,
                "name": payload.name,
                "description": payload.description,
                "status": payload.status.value,
                "start_date": payload.start_date,
                "end_date": payload.end_date,
                "responsible_id": payload.responsible_id,
                "budget": payload.budget,
                "priority": payload.priority.value,
                "progress_percentage": payload.progress_percentage,
                "custom_data": self.field_service.filter_custom_data(FieldScope.PROJECT, payload.custom_data),
                "created_at": now,
                "updated_at": now,
                "deleted_at": None,
            }
        )
        logger.info("Project id=%s created by user id=%s", row["id"], caller.id)
        return self._to_project_model(row)

    def update_project(self, project_id: str, payload: ProjectUpdate) -> ProjectRecord:
        row = self.repository.find_project(project_id)
        if not row or row.get("deleted_at"):
            raise NotFound(PROJECT_NOT_FOUND)

        fields_set = payload.model_fields_set
        if payload.client_id is not None:
            self._check_references(payload.client_id, None)
            row["client_id"] = payload.client_id
        if "responsible_id" in fields_set:
            self._check_references(None, payload.responsible_id)
            row["responsible_id"] = payload.responsible_id
        if payload.name is not None:
            row["name"] = payload.name
        if payload.description is not None:
            row["description"] = payload.description
        if payload.status is not None:
            row["status"] = payload.status.value
        if "start_date" in fields_set:
            row["start_date"] = payload.start_date
        if "end_date" in fields_set:
            row["end_date"] = payload.end_date
        if "budget" in fields_set:
            row["budget"] = payload.budget
        if payload.priority is not None:
            row["priority"] = payload.priority.value
        if payload.progress_percentage is not None:
            row["progress_percentage"] = payload.progress_percentage
        if payload.custom_data is not None:
            row["custom_data"] = self.field_service.filter_custom_data(
                FieldScope.PROJECT, payload.custom_data
            )

        if row.get("start_date") and row.get("end_date") and row["end_date"] < row["start_date"]:
            raise ValidationError("La fecha de fin debe ser posterior a la fecha de inicio")
        row["updated_at"] = utcnow()

        saved = self.repository.save_project(row)
        if not saved:
            raise NotFound(PROJECT_NOT_FOUND)
        return self._to_project_model(saved)

    def _check_references(self, client_id: Optional[str], responsible_id: Optional[str]) -> None:
        if client_id is not None and not self.repository.find_client(client_id):
            raise ValidationError("El cliente no existe")
        if responsible_id is not None and not self.repository.find_user_by_id(responsible_id):
            raise ValidationError("El responsable no existe")

    def _to_project_model(self, row: dict[str, Any]) -> ProjectRecord:
        client = self.repository.find_client(row["client_id"]) if row.get("client_id") else None
        responsible = (
            self.repository.find_user_by_id(row["responsible_id"]) if row.get("responsible_id") else None
        )
        return ProjectRecord(
            id=row["id"],
            client_id=row["client_id"],
            name=row["name"],
            description=row.get("description") or "",
            status=row["status"],
            start_date=row.get("start_date"),
            end_date=row.get("end_date"),
            responsible_id=row.get("responsible_id"),
            budget=row.get("budget"),
            priority=row.get("priority") or "medium",
            progress_percentage=row.get("progress_percentage") or 0,
            custom_data=row.get("custom_data") or {},
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            client_name=client["name"] if client else "N/A",
            responsible_name=responsible["username"] if responsible else "N/A",
            tasks=self.task_service.list_tasks(row["id"]),
        )
