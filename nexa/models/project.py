from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from nexa.models.task import TaskRecord


class ProjectStatus(str, Enum):
    PROSPECTADO = "prospectado"
    COTIZADO = "cotizado"
    EN_PROGRESO = "en_progreso"
    PAUSADO = "pausado"
    FINALIZADO = "finalizado"


class ProjectPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ProjectCreate(BaseModel):
    client_id: str
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    status: ProjectStatus = ProjectStatus.PROSPECTADO
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    responsible_id: Optional[str] = None
    budget: Optional[float] = Field(default=None, gt=0)
    priority: ProjectPriority = ProjectPriority.MEDIUM
    progress_percentage: int = Field(default=0, ge=0, le=100)
    custom_data: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def coerce_client_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("client_id"), int):
            data = {**data, "client_id": str(data["client_id"])}
        return data

    @model_validator(mode="after")
    def validate_date_range(self) -> "ProjectCreate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("La fecha de fin debe ser posterior a la fecha de inicio")
        return self


class ProjectUpdate(BaseModel):
    client_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    responsible_id: Optional[str] = None
    budget: Optional[float] = Field(default=None, gt=0)
    priority: Optional[ProjectPriority] = None
    progress_percentage: Optional[int] = Field(default=None, ge=0, le=100)
    custom_data: Optional[dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def coerce_client_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("client_id"), int):
            data = {**data, "client_id": str(data["client_id"])}
        return data


class ProjectRecord(BaseModel):
    id: str
    client_id: str
    name: str
    description: str = ""
    status: ProjectStatus
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    responsible_id: Optional[str] = None
    budget: Optional[float] = None
    priority: ProjectPriority = ProjectPriority.MEDIUM
    progress_percentage: int = 0
    custom_data: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    client_name: str = "N/A"
    responsible_name: str = "N/A"
    tasks: list[TaskRecord] = Field(default_factory=list)
