from fastapi import APIRouter, Depends, status

from nexa.api.deps import get_container, require_capability
from nexa.core.rbac import Capability
from nexa.models.auth import TokenPayload
from nexa.models.common import CreatedResponse, MessageResponse
from nexa.models.fields import (
    FieldDefinitionCreate,
    FieldDefinitionRecord,
    FieldDefinitionUpdate,
    FieldScope,
)
from nexa.models.project import ProjectCreate, ProjectRecord, ProjectUpdate
from nexa.models.task import TaskCreate, TaskRecord, TaskResponse, TaskStatusUpdate, TaskUpdate
from nexa.services.container import ServiceContainer


router = APIRouter(prefix="/api/projects", tags=["Projects"])


# Custom field definitions
@router.get("/meta/fields", response_model=list[FieldDefinitionRecord])
def list_active_project_fields(
    current_user: TokenPayload = Depends(require_capability(Capability.PROJECT_FIELDS_READ)),
    container: ServiceContainer = Depends(get_container),
) -> list[FieldDefinitionRecord]:
    _ = current_user
    return container.field_service.list_definitions(FieldScope.PROJECT)


@router.get("/meta/fields/all", response_model=list[FieldDefinitionRecord])
def list_all_project_fields(
    current_user: TokenPayload = Depends(require_capability(Capability.PROJECT_FIELDS_MANAGE)),
    container: ServiceContainer = Depends(get_container),
) -> list[FieldDefinitionRecord]:
    _ = current_user
    return container.field_service.list_definitions(FieldScope.PROJECT, include_inactive=True)


@router.post("/meta/fields", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_project_field(
    payload: FieldDefinitionCreate,
    current_user: TokenPayload = Depends(require_capability(Capability.PROJECT_FIELDS_MANAGE)),
    container: ServiceContainer = Depends(get_container),
) -> MessageResponse:
    _ = current_user
    container.field_service.create_definition(FieldScope.PROJECT, payload)
    return MessageResponse(message="Campo de proyecto creado exitosamente")


@router.put("/meta/fields/{field_id}", response_model=FieldDefinitionRecord)
def update_project_field(
    field_id: str,
    payload: FieldDefinitionUpdate,
    current_user: TokenPayload = Depends(require_capability(Capability.PROJECT_FIELDS_MANAGE)),
    container: ServiceContainer = Depends(get_container),
) -> FieldDefinitionRecord:
    _ = current_user
    return container.field_service.update_definition(FieldScope.PROJECT, field_id, payload)


@router.delete("/meta/fields/{field_id}", response_model=MessageResponse)
def deactivate_project_field(
    field_id: str,
    current_user: TokenPayload = Depends(require_capability(Capability.PROJECT_FIELDS_MANAGE)),
    container: ServiceContainer = Depends(get_container),
) -> MessageResponse:
    _ = current_user
    container.field_service.deactivate_definition(FieldScope.PROJECT, field_id)
    return MessageResponse(message="Campo de proyecto desactivado exitosamente")


# Tasks
@router.get("/tasks/{task_id}", response_model=TaskRecord)
def get_task(
    task_id: str,
    current_user: TokenPayload = Depends(require_capability(Capability.TASKS_READ)),
    container: ServiceContainer = Depends(get_container),
) -> TaskRecord:
    _ = current_user
    return container.task_service.get_task(task_id)


@router.put("/tasks/{task_id}/status", response_model=TaskResponse)
def update_task_status(
    task_id: str,
    payload: TaskStatusUpdate,
    current_user: TokenPayload = Depends(require_capability(Capability.TASKS_STATUS)),
    container: ServiceContainer = Depends(get_container),
) -> TaskResponse:
    task = container.task_service.set_status(task_id, payload.status, current_user)
    return TaskResponse(message="Estado de tarea actualizado exitosamente", task=task)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    current_user: TokenPayload = Depends(require_capability(Capability.TASKS_UPDATE)),
    container: ServiceContainer = Depends(get_container),
) -> TaskResponse:
    task = container.task_service.update_fields(task_id, payload.to_changes(), current_user)
    return TaskResponse(message="Tarea actualizada exitosamente", task=task)


@router.post("/{project_id}/tasks", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    project_id: str,
    payload: TaskCreate,
    current_user: TokenPayload = Depends(require_capability(Capability.TASKS_CREATE)),
    container: ServiceContainer = Depends(get_container),
) -> CreatedResponse:
    task = container.task_service.create_task(
        current_user,
        project_id,
        description=payload.description,
        assigned_to=payload.assigned_to,
        status=payload.status,
    )
    return CreatedResponse(id=task.id, message="Tarea creada exitosamente")


# Projects
@router.get("", response_model=list[ProjectRecord])
def list_projects(
    current_user: TokenPayload = Depends(require_capability(Capability.PROJECTS_READ)),
    container: ServiceContainer = Depends(get_container),
) -> list[ProjectRecord]:
    _ = current_user
    return container.project_service.list_projects()


@router.get("/{project_id}", response_model=ProjectRecord)
def get_project(
    project_id: str,
    current_user: TokenPayload = Depends(require_capability(Capability.PROJECTS_READ)),
    container: ServiceContainer = Depends(get_container),
) -> ProjectRecord:
    _ = current_user
    return container.project_service.get_project(project_id)


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    current_user: TokenPayload = Depends(require_capability(Capability.PROJECTS_WRITE)),
    container: ServiceContainer = Depends(get_container),
) -> CreatedResponse:
    project = container.project_service.create_project(current_user, payload)
    return CreatedResponse(id=project.id, message="Proyecto creado exitosamente")


@router.put("/{project_id}", response_model=MessageResponse)
def update_project(
    project_id: str,
    payload: ProjectUpdate,
    current_user: TokenPayload = Depends(require_capability(Capability.PROJECTS_WRITE)),
    container: ServiceContainer = Depends(get_container),
) -> MessageResponse:
    _ = current_user
    container.project_service.update_project(project_id, payload)
    return MessageResponse(message="Proyecto actualizado exitosamente")
