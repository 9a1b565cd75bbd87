from __future__ import annotations

import logging
from datetime import date, timedelta
from functools import lru_cache

from nexa.core.rbac import Role
from nexa.core.security import hash_password
from nexa.models.fields import FieldScope
from nexa.models.project import ProjectPriority, ProjectStatus
from nexa.models.task import TaskStatus
from nexa.repositories.base import Repository, utcnow


logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "admin123"


@lru_cache(maxsize=None)
def _default_password_hash() -> str:
    return hash_password(DEFAULT_PASSWORD)


def seed_repository(repository: Repository) -> bool:
    """Load demo records into an empty store. Returns ``False`` if it already had users."""
    if repository.has_users():
        return False

    password_hash = _default_password_hash()
    base_time = utcnow() - timedelta(days=30)

    users = {}
    for offset, (username, role) in enumerate(
        [("admin", Role.ADMIN), ("manager", Role.MANAGER), ("user", Role.USER)]
    ):
        users[username] = repository.add_user(
            {
                "username": username,
                "email": f"{username}@nexa-sys.com",
                "password_hash": password_hash,
                "role": role.value,
                "active": True,
                "created_at": base_time + timedelta(minutes=offset),
            }
        )

    for definition in [
        {"scope": FieldScope.CLIENT, "name": "rfc", "label": "RFC", "type": "text",
         "category": "Datos Fiscales", "sort_order": 1},
        {"scope": FieldScope.CLIENT, "name": "anniversary_date", "label": "Fecha Aniversario",
         "type": "date", "category": "General", "sort_order": 2},
        {"scope": FieldScope.PROJECT, "name": "repo_url", "label": "URL del Repositorio",
         "type": "url", "category": "Técnico", "sort_order": 1},
        {"scope": FieldScope.PROJECT, "name": "tech_stack", "label": "Stack Tecnológico",
         "type": "multiselect", "category": "Técnico", "sort_order": 2,
         "options": ["React", "Vue", "Angular", "Node.js"]},
        {"scope": FieldScope.PROJECT, "name": "sprint_actual", "label": "Sprint Actual",
         "type": "number", "category": "Agile", "sort_order": 3},
        {"scope": FieldScope.PROJECT, "name": "budget_approved", "label": "Presupuesto Aprobado",
         "type": "checkbox", "category": "Financiero", "sort_order": 4, "is_required": True},
    ]:
        repository.add_field_definition(
            {
                "is_required": False,
                "options": None,
                "active": True,
                **definition,
                "scope": definition["scope"].value,
            }
        )

    innovatech = repository.add_client(
        {
            "name": "Innovatech S.A.",
            "contact_name": "Carlos Mendez",
            "industry": "tech",
            "email": "c.mendez@innovatech.com",
            "phone": "+52 55 1234 5678",
            "notes": "",
            "projects": ["Migración Cloud", "App Móvil"],
            "active": True,
            "custom_data": {"rfc": "INN123456789"},
            "created_at": base_time,
        }
    )
    repository.add_client(
        {
            "name": "Grupo Retail MX",
            "contact_name": "Sofia Ramirez",
            "industry": "retail",
            "email": "sramirez@gruporetail.mx",
            "phone": "+52 81 8888 9999",
            "notes": "",
            "projects": ["eCommerce"],
            "active": False,
            "custom_data": {},
            "created_at": base_time + timedelta(minutes=1),
        }
    )

    project = repository.add_project(
        {
            "client_id": innovatech["id"],
            "name": "Migración Cloud Innovatech",
            "description": "Migración de servidores legacy a Azure",
            "status": ProjectStatus.EN_PROGRESO.value,
            "start_date": date(2023, 10, 1),
            "end_date": date(2024, 3, 31),
            "responsible_id": users["admin"]["id"],
            "budget": 150000.0,
            "priority": ProjectPriority.HIGH.value,
            "progress_percentage": 65,
            "custom_data": {
                "repo_url": "https://github.com/innovatech/migration",
                "tech_stack": ["Azure", "Node.js", "React"],
            },
            "created_at": base_time,
        }
    )

    for offset, (description, status, assignee) in enumerate(
        [
            ("Análisis de arquitectura actual", TaskStatus.COMPLETADA, users["manager"]),
            ("Configuración de Tenant Azure", TaskStatus.EN_PROGRESO, users["admin"]),
        ]
    ):
        created_at = base_time + timedelta(hours=offset)
        repository.add_task(
            {
                "project_id": project["id"],
                "description": description,
                "status": status.value,
                "assigned_to": assignee["id"],
                "created_by": users["admin"]["id"],
                "created_at": created_at,
                "updated_at": created_at,
                "approved_by": None,
                "approved_at": None,
            }
        )

    logger.info("Seeded %s repository with demo data", repository.backend_name)
    return True
