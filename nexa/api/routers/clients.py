from fastapi import APIRouter, Depends, status

from nexa.api.deps import get_container, require_capability
from nexa.core.rbac import Capability
from nexa.models.auth import TokenPayload
from nexa.models.client import ClientCreate, ClientRecord, ClientUpdate
from nexa.models.common import CreatedResponse, MessageResponse
from nexa.models.fields import (
    FieldDefinitionCreate,
    FieldDefinitionRecord,
    FieldDefinitionUpdate,
    FieldScope,
)
from nexa.services.container import ServiceContainer


router = APIRouter(prefix="/api/clients", tags=["Clients"])


@router.get("", response_model=list[ClientRecord])
def list_clients(
    current_user: TokenPayload = Depends(require_capability(Capability.CLIENTS_READ)),
    container: ServiceContainer = Depends(get_container),
) -> list[ClientRecord]:
    return container.client_service.list_clients(current_user)


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_client(
    payload: ClientCreate,
    current_user: TokenPayload = Depends(require_capability(Capability.CLIENTS_CREATE)),
    container: ServiceContainer = Depends(get_container),
) -> CreatedResponse:
    client = container.client_service.create_client(current_user, payload)
    return CreatedResponse(id=client.id, message="Cliente creado exitosamente")


@router.get("/fields", response_model=list[FieldDefinitionRecord])
def list_client_fields(
    current_user: TokenPayload = Depends(require_capability(Capability.CLIENT_FIELDS_READ)),
    container: ServiceContainer = Depends(get_container),
) -> list[FieldDefinitionRecord]:
    _ = current_user
    return container.field_service.list_definitions(FieldScope.CLIENT, include_inactive=True)


@router.post("/fields", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_client_field(
    payload: FieldDefinitionCreate,
    current_user: TokenPayload = Depends(require_capability(Capability.CLIENT_FIELDS_MANAGE)),
    container: ServiceContainer = Depends(get_container),
) -> MessageResponse:
    _ = current_user
    container.field_service.create_definition(FieldScope.CLIENT, payload)
    return MessageResponse(message="Campo agregado exitosamente")


@router.put("/fields/{field_id}", response_model=MessageResponse)
def update_client_field(
    field_id: str,
    payload: FieldDefinitionUpdate,
    current_user: TokenPayload = Depends(require_capability(Capability.CLIENT_FIELDS_MANAGE)),
    container: ServiceContainer = Depends(get_container),
) -> MessageResponse:
    _ = current_user
    container.field_service.update_definition(FieldScope.CLIENT, field_id, payload)
    return MessageResponse(message="Campo actualizado exitosamente")


@router.put("/{client_id}", response_model=MessageResponse)
def update_client(
    client_id: str,
    payload: ClientUpdate,
    current_user: TokenPayload = Depends(require_capability(Capability.CLIENTS_UPDATE)),
    container: ServiceContainer = Depends(get_container),
) -> MessageResponse:
    _ = current_user
    container.client_service.update_client(client_id, payload)
    return MessageResponse(message="Cliente actualizado exitosamente")
