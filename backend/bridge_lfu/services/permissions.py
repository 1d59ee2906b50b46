"""Role-based permission model.

Permissions are plain data: each role maps to a tuple of rules naming an action,
a resource and an optional condition evaluated against the resource being
accessed. A rule that is missing is a deny. Nothing here touches the database.
"""
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from bridge_lfu.models.user import Role

Condition = Callable[[Any, Any], bool]


@dataclass(frozen=True)
class Permission:
    """A single (action, resource) grant, optionally restricted by a condition."""

    action: str
    resource: str
    condition: Condition | None = None


def _field(resource_data: Any, name: str) -> Any:
    """Read a field from a dict-like or attribute-style resource snapshot."""
    if resource_data is None:
        return None
    if isinstance(resource_data, Mapping):
        return resource_data.get(name)
    return getattr(resource_data, name, None)


def _same_client(field_name: str) -> Condition:
    def condition(user, resource_data) -> bool:
        client_id = getattr(user, "client_id", None)
        return client_id is not None and client_id == _field(resource_data, field_name)

    return condition


def _same_user(field_name: str) -> Condition:
    def condition(user, resource_data) -> bool:
        user_id = getattr(user, "id", None)
        return user_id is not None and user_id == _field(resource_data, field_name)

    return condition


def _full_access(*resources: str) -> tuple[Permission, ...]:
    return tuple(
        Permission(action, resource)
        for resource in resources
        for action in ("create", "read", "update", "delete")
    )


_ADMIN_PERMISSIONS = (
    Permission("read", "dashboard"),
    *_full_access("clients", "licenses", "equipment", "users"),
    Permission("read", "reports"),
    Permission("export", "reports"),
    Permission("create", "notifications"),
    Permission("read", "notifications"),
    Permission("manage", "system_settings"),
    Permission("read", "activity_logs"),
)

_TECHNICIAN_PERMISSIONS = (
    Permission("read", "dashboard"),
    *_full_access("clients", "licenses", "equipment"),
    Permission("read", "users"),
    Permission("read", "reports"),
    Permission("export", "reports"),
    Permission("create", "notifications"),
    Permission("read", "notifications"),
)

_CLIENT_PERMISSIONS = (
    Permission("read", "dashboard"),
    Permission("read", "clients", _same_client("id")),
    Permission("read", "licenses", _same_client("client_id")),
    Permission("read", "equipment", _same_client("client_id")),
    Permission("read", "users", _same_user("id")),
    Permission("update", "users", _same_user("id")),
    Permission("read", "reports", _same_client("client_id")),
    Permission("read", "notifications", _same_user("user_id")),
)

ROLE_PERMISSIONS: Mapping[Role, tuple[Permission, ...]] = MappingProxyType({
    Role.ADMIN: _ADMIN_PERMISSIONS,
    Role.TECHNICIAN: _TECHNICIAN_PERMISSIONS,
    Role.CLIENT: _CLIENT_PERMISSIONS,
    Role.UNVERIFIED: (),
})


def _role_of(user) -> Role | None:
    raw = getattr(user, "role", None)
    if raw is None:
        return None
    try:
        return Role(raw)
    except ValueError:
        return None


def find_permission(user, action: str, resource: str) -> Permission | None:
    """Return the rule granting (action, resource) to the user's role, if any."""
    role = _role_of(user)
    if role is None:
        return None
    for permission in ROLE_PERMISSIONS.get(role, ()):
        if permission.action == action and permission.resource == resource:
            return permission
    return None


def can(user, action: str, resource: str, resource_data: Any = None) -> bool:
    """Check whether a user may perform an action on a resource.

    Conditioned rules are evaluated against ``resource_data`` (a dict or a model
    instance). Without a snapshot they receive None and deny. Never raises.
    """
    if user is None:
        return False

    permission = find_permission(user, action, resource)
    if permission is None:
        return False

    if permission.condition is None:
        return True

    try:
        return bool(permission.condition(user, resource_data))
    except Exception:
        return False


def can_access_client(user, client_id: str | None) -> bool:
    """Whether the user may read data belonging to the given client."""
    return can(user, "read", "clients", {"id": client_id})


def can_view_all_data(user) -> bool:
    """True for roles reading clients without restriction (admin, technician)."""
    permission = find_permission(user, "read", "clients")
    return permission is not None and permission.condition is None


def can_manage_users(user) -> bool:
    return can(user, "create", "users")


def can_view_activity_logs(user) -> bool:
    return can(user, "read", "activity_logs")


def can_export_reports(user) -> bool:
    return can(user, "export", "reports")


def _can_manage(user, resource: str) -> bool:
    return any(can(user, action, resource) for action in ("create", "update", "delete"))


def get_permissions(user) -> dict:
    """Summarize the user's capabilities for the UI."""
    role = _role_of(user)
    return {
        "can_manage_clients": _can_manage(user, "clients"),
        "can_manage_licenses": _can_manage(user, "licenses"),
        "can_manage_equipment": _can_manage(user, "equipment"),
        "can_view_reports": can(user, "read", "reports"),
        "can_manage_users": _can_manage(user, "users"),
        "can_view_all_data": can_view_all_data(user),
        "client_access": getattr(user, "client_id", None) if role == Role.CLIENT else None,
    }


def permission_check(action: str, resource: str) -> Callable[..., bool]:
    """Build a reusable checker bound to one (action, resource) pair."""
    def check(user, resource_data: Any = None) -> bool:
        return can(user, action, resource, resource_data)

    return check
