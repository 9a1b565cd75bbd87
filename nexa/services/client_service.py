from __future__ import annotations

import logging
from typing import Any

from nexa.core.errors import NotFound
from nexa.core.rbac import Role
from nexa.models.auth import TokenPayload
from nexa.models.client import ClientCreate, ClientRecord, ClientUpdate
from nexa.models.fields import FieldScope
from nexa.repositories.base import Repository, utcnow
from nexa.services.field_service import FieldService


logger = logging.getLogger(__name__)


class ClientService:
    def __init__(self, repository: Repository, field_service: FieldService) -> None:
        self.repository = repository
        self.field_service = field_service

    def list_clients(self, caller: TokenPayload) -> list[ClientRecord]:
        # Plain users only ever see active clients.
        rows = self.repository.list_clients(active_only=caller.role == Role.USER)
        return [self._to_model(r) for r in rows]

    def create_client(self, caller: TokenPayload, payload: ClientCreate) -> ClientRecord:
        row = self.repository.add_client(
            {
                "name": payload.name,
                "contact_name": payload.contact_name,
                "industry": payload.industry,
                "email": str(payload.email),
                "phone": payload.phone,
                "notes": payload.notes,
                "projects": list(payload.projects),
                "active": True,
                "custom_data": self.field_service.filter_custom_data(FieldScope.CLIENT, payload.custom_data),
            }
        )
        logger.info("Client id=%s created by user id=%s", row["id"], caller.id)
        return self._to_model(row)

    def update_client(self, client_id: str, payload: ClientUpdate) -> ClientRecord:
        row = self.repository.find_client(client_id)
        if not row:
            raise NotFound("Cliente no encontrado")

        if payload.name is not None:
            row["name"] = payload.name
        if payload.contact_name is not None:
            row["contact_name"] = payload.contact_name
        if payload.industry is not None:
            row["industry"] = payload.industry
        if payload.email is not None:
            row["email"] = str(payload.email)
        if payload.phone is not None:
            row["phone"] = payload.phone
        if payload.notes is not None:
            row["notes"] = payload.notes
        if payload.projects is not None:
            row["projects"] = list(payload.projects)
        if payload.custom_data is not None:
            row["custom_data"] = self.field_service.filter_custom_data(
                FieldScope.CLIENT, payload.custom_data
            )
        if payload.active is not None:
            row["active"] = payload.active
        row["updated_at"] = utcnow()

        saved = self.repository.save_client(row)
        if not saved:
            raise NotFound("Cliente no encontrado")
        return self._to_model(saved)

    @staticmethod
    def _to_model(row: dict[str, Any]) -> ClientRecord:
        return ClientRecord(
            id=row["id"],
            name=row["name"],
            contact_name=row.get("contact_name") or "",
            industry=row.get("industry") or "",
            email=row["email"],
            phone=row.get("phone") or "",
            notes=row.get("notes") or "",
            projects=row.get("projects") or [],
            active=bool(row.get("active", True)),
            custom_data=row.get("custom_data") or {},
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
