from __future__ import annotations

from typing import Mapping, Optional, Protocol

from ..core.enums import Permission, Role
from ..core.exceptions import AuthorizationError
from .model import Identity

DEFAULT_ROLE_PERMISSIONS: Mapping[Role, frozenset[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.MANAGER: frozenset(
        {Permission.VIEW_ALL_SESSIONS, Permission.EDIT_ANY_NOTES, Permission.VIEW_REPORTS}
    ),
    Role.STAFF: frozenset(),
}


class AccessPolicy(Protocol):
    def is_allowed(self, identity: Identity, permission: Permission) -> bool:
        raise NotImplementedError


class RoleAccessPolicy:
    """Maps the caller's role to a fixed permission set."""

    def __init__(self, role_permissions: Optional[Mapping[Role, frozenset[Permission]]] = None):
        self._role_permissions = dict(role_permissions or DEFAULT_ROLE_PERMISSIONS)

    def is_allowed(self, identity: Identity, permission: Permission) -> bool:
        return permission in self._role_permissions.get(identity.role, frozenset())


def require_permission(policy: AccessPolicy, identity: Identity, permission: Permission) -> None:
    if not policy.is_allowed(identity, permission):
        raise AuthorizationError("You do not have permission to perform this action")


def require_self_or_permission(
    policy: AccessPolicy,
    identity: Identity,
    target_user_id: str,
    permission: Permission,
) -> None:
    if str(target_user_id) == identity.user_id:
        return
    require_permission(policy, identity, permission)
