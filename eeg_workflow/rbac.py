"""
Role-Based Access Control – role and permission membership checks.

Every check here is total: a missing user or a malformed capability map
simply means "not granted".
"""

from typing import Iterable, Optional, Union

from eeg_workflow.models import User

RoleSpec = Union[str, Iterable[str], None]


def has_permission(user: Optional[User], permission_name: str) -> bool:
    """True iff the user's capability table grants ``permission_name``."""
    if user is None or not isinstance(permission_name, str):
        return False
    capabilities = getattr(user, "capabilities", None)
    if not isinstance(capabilities, dict):
        return False
    return capabilities.get(permission_name) is True


def has_role(user: Optional[User], allowed_roles: RoleSpec) -> bool:
    """True iff the user's role label is one of ``allowed_roles`` (a single label counts as one)."""
    if user is None or allowed_roles is None:
        return False
    role = getattr(user, "role_label", None)
    if not role:
        return False
    if isinstance(allowed_roles, str):
        return role == allowed_roles
    try:
        return role in set(allowed_roles)
    except TypeError:
        return False


def has_any_permission(user: Optional[User], permission_names: Iterable[str]) -> bool:
    return any(has_permission(user, p) for p in permission_names)


def has_all_permissions(user: Optional[User], permission_names: Iterable[str]) -> bool:
    names = list(permission_names)
    return bool(names) and all(has_permission(user, p) for p in names)


def can_access(
    user: Optional[User],
    allowed_roles: RoleSpec,
    permissions: Union[str, Iterable[str]] = (),
    require_all: bool = False,
) -> bool:
    """
    Gate for role-restricted content (menus, dashboards, action bars).

    The role must match; when ``permissions`` is given the user also needs
    one of them, or every one of them with ``require_all``.
    """
    if user is None or not has_role(user, allowed_roles):
        return False

    if isinstance(permissions, str):
        return has_permission(user, permissions)

    names = list(permissions)
    if not names:
        return True
    if require_all:
        return has_all_permissions(user, names)
    return has_any_permission(user, names)
