import pytest

from nexa.core.rbac import (
    CAPABILITY_ROLES,
    ROLE_RANK,
    Capability,
    Role,
    allowed_roles,
    has_capability,
    missing_privilege_message,
    visible_user_roles,
)


def test_every_capability_has_a_policy_entry():
    assert set(CAPABILITY_ROLES) == set(Capability)


@pytest.mark.parametrize("capability", list(Capability))
def test_higher_roles_keep_every_lower_role_privilege(capability):
    for role in Role:
        if not has_capability(role, capability):
            continue
        stronger = [r for r in Role if ROLE_RANK[r] > ROLE_RANK[role]]
        for other in stronger:
            assert has_capability(other, capability), (other, capability)


def test_admin_holds_every_capability():
    assert all(has_capability(Role.ADMIN, c) for c in Capability)


def test_approval_is_reserved_to_staff():
    assert allowed_roles(Capability.TASKS_APPROVE) == {Role.ADMIN, Role.MANAGER}
    assert not has_capability(Role.USER, Capability.TASKS_APPROVE)
    assert has_capability(Role.USER, Capability.TASKS_STATUS)


def test_has_capability_accepts_raw_strings():
    assert has_capability("manager", Capability.USERS_LIST)
    assert not has_capability("superuser", Capability.USERS_LIST)


def test_missing_privilege_message_lists_roles_highest_first():
    assert missing_privilege_message(Capability.USERS_LIST) == (
        "Acceso denegado: Se requiere rol de Administrador o Manager"
    )
    assert missing_privilege_message(Capability.USERS_CREATE) == (
        "Acceso denegado: Se requiere rol de Administrador"
    )


def test_visible_user_roles():
    assert visible_user_roles(Role.ADMIN) is None
    assert visible_user_roles("manager") == {Role.USER}
    assert visible_user_roles(Role.USER) == frozenset()
