from __future__ import annotations

import logging
import re
from typing import Any

from nexa.core.errors import NotFound, ValidationError
from nexa.models.fields import (
    FIELD_TYPES,
    FieldDefinitionCreate,
    FieldDefinitionRecord,
    FieldDefinitionUpdate,
    FieldScope,
)
from nexa.repositories.base import Repository


logger = logging.getLogger(__name__)

FIELD_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")


def normalize_field_name(name: str) -> str:
    return re.sub(r"\s+", "_", name.strip().lower())


class FieldService:
    """User-defined custom fields for projects and clients."""

    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    def list_definitions(self, scope: FieldScope, include_inactive: bool = False) -> list[FieldDefinitionRecord]:
        rows = self.repository.list_field_definitions(scope, active_only=not include_inactive)
        return [self._to_model(r) for r in rows]

    def create_definition(self, scope: FieldScope, payload: FieldDefinitionCreate) -> FieldDefinitionRecord:
        name = normalize_field_name(payload.name)
        if not FIELD_NAME_PATTERN.match(name):
            raise ValidationError(
                "El nombre debe comenzar con letra minúscula y contener solo letras, números y guiones bajos"
            )
        self._check_type(scope, payload.type)
        if self.repository.find_field_definition_by_name(scope, name):
            raise ValidationError("El campo ya existe")

        row = self.repository.add_field_definition(
            {
                "scope": FieldScope(scope).value,
                "name": name,
                "label": payload.label,
                "type": payload.type,
                "category": payload.category or "General",
                "is_required": payload.is_required,
                "sort_order": payload.sort_order,
                "options": payload.options,
                "active": True,
            }
        )
        logger.info("Created %s field definition %s", row["scope"], name)
        return self._to_model(row)

    def update_definition(
        self, scope: FieldScope, field_id: str, payload: FieldDefinitionUpdate
    ) -> FieldDefinitionRecord:
        row = self.repository.find_field_definition(scope, field_id)
        if not row:
            raise NotFound("Campo no encontrado")

        if payload.type is not None:
            self._check_type(scope, payload.type)
            row["type"] = payload.type
        if payload.label is not None:
            row["label"] = payload.label
        if payload.category is not None:
            row["category"] = payload.category
        if payload.is_required is not None:
            row["is_required"] = payload.is_required
        if payload.sort_order is not None:
            row["sort_order"] = payload.sort_order
        if payload.options is not None:
            row["options"] = payload.options
        if payload.active is not None:
            row["active"] = payload.active

        saved = self.repository.save_field_definition(row)
        if not saved:
            raise NotFound("Campo no encontrado")
        return self._to_model(saved)

    def deactivate_definition(self, scope: FieldScope, field_id: str) -> FieldDefinitionRecord:
        return self.update_definition(scope, field_id, FieldDefinitionUpdate(active=False))

    def filter_custom_data(self, scope: FieldScope, data: dict[str, Any] | None) -> dict[str, Any]:
        """Keep only values whose key names an active definition of ``scope``."""
        if not data:
            return {}
        known = {r["name"] for r in self.repository.list_field_definitions(scope, active_only=True)}
        dropped = sorted(set(data) - known)
        if dropped:
            logger.debug("Ignoring unknown %s custom fields: %s", FieldScope(scope).value, dropped)
        return {key: value for key, value in data.items() if key in known}

    @staticmethod
    def _check_type(scope: FieldScope, field_type: str) -> None:
        allowed = FIELD_TYPES[FieldScope(scope)]
        if field_type not in allowed:
            raise ValidationError(f"El tipo debe ser {', '.join(sorted(allowed))}")

    @staticmethod
    def _to_model(row: dict[str, Any]) -> FieldDefinitionRecord:
        return FieldDefinitionRecord(
            id=row["id"],
            scope=row["scope"],
            name=row["name"],
            label=row["label"],
            type=row["type"],
            category=row.get("category") or "General",
            is_required=bool(row.get("is_required")),
            sort_order=row.get("sort_order") or 0,
            options=row.get("options"),
            active=bool(row.get("active", True)),
        )
