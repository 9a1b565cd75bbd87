from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class Capability(str, Enum):
    USERS_LIST = "users:list"
    USERS_CREATE = "users:create"
    USERS_UPDATE = "users:update"
    USERS_STATUS = "users:status"
    CLIENTS_READ = "clients:read"
    CLIENTS_CREATE = "clients:create"
    CLIENTS_UPDATE = "clients:update"
    CLIENT_FIELDS_READ = "client_fields:read"
    CLIENT_FIELDS_MANAGE = "client_fields:manage"
    PROJECTS_READ = "projects:read"
    PROJECTS_WRITE = "projects:write"
    PROJECT_FIELDS_READ = "project_fields:read"
    PROJECT_FIELDS_MANAGE = "project_fields:manage"
    TASKS_READ = "tasks:read"
    TASKS_CREATE = "tasks:create"
    TASKS_STATUS = "tasks:status"
    TASKS_APPROVE = "tasks:approve"
    TASKS_UPDATE = "tasks:update"
    DASHBOARD_READ = "dashboard:read"


ALL_ROLES = frozenset(Role)
STAFF_ROLES = frozenset({Role.ADMIN, Role.MANAGER})
ADMIN_ONLY = frozenset({Role.ADMIN})


CAPABILITY_ROLES: dict[Capability, frozenset[Role]] = {
    Capability.USERS_LIST: STAFF_ROLES,
    Capability.USERS_CREATE: ADMIN_ONLY,
    Capability.USERS_UPDATE: ADMIN_ONLY,
    Capability.USERS_STATUS: ADMIN_ONLY,
    Capability.CLIENTS_READ: ALL_ROLES,
    Capability.CLIENTS_CREATE: ALL_ROLES,
    Capability.CLIENTS_UPDATE: STAFF_ROLES,
    Capability.CLIENT_FIELDS_READ: ALL_ROLES,
    Capability.CLIENT_FIELDS_MANAGE: ADMIN_ONLY,
    Capability.PROJECTS_READ: ALL_ROLES,
    Capability.PROJECTS_WRITE: STAFF_ROLES,
    Capability.PROJECT_FIELDS_READ: ALL_ROLES,
    Capability.PROJECT_FIELDS_MANAGE: STAFF_ROLES,
    Capability.TASKS_READ: ALL_ROLES,
    Capability.TASKS_CREATE: ALL_ROLES,
    Capability.TASKS_STATUS: ALL_ROLES,
    Capability.TASKS_APPROVE: STAFF_ROLES,
    Capability.TASKS_UPDATE: STAFF_ROLES,
    Capability.DASHBOARD_READ: ALL_ROLES,
}

# Privilege order, highest first.
ROLE_RANK: dict[Role, int] = {Role.ADMIN: 2, Role.MANAGER: 1, Role.USER: 0}

ROLE_LABELS: dict[Role, str] = {
    Role.ADMIN: "Administrador",
    Role.MANAGER: "Manager",
    Role.USER: "Usuario",
}


def allowed_roles(capability: Capability) -> frozenset[Role]:
    return CAPABILITY_ROLES.get(capability, frozenset())


def has_capability(role: Role | str, capability: Capability) -> bool:
    try:
        role = Role(role)
    except ValueError:
        return False
    return role in allowed_roles(capability)


def missing_privilege_message(capability: Capability) -> str:
    roles = sorted(allowed_roles(capability), key=lambda r: ROLE_RANK[r], reverse=True)
    labels = " o ".join(ROLE_LABELS[r] for r in roles)
    return f"Acceso denegado: Se requiere rol de {labels}"


def visible_user_roles(viewer_role: Role | str) -> frozenset[Role] | None:
    """Roles a viewer may see when listing identities; ``None`` means unfiltered."""
    viewer_role = Role(viewer_role)
    if viewer_role == Role.ADMIN:
        return None
    if viewer_role == Role.MANAGER:
        return frozenset({Role.USER})
    return frozenset()
