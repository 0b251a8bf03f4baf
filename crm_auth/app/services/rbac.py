"""
RBAC Guard

Permissions resolve as role -> role_permissions -> permissions. The
default role of an organization is immutable through role management,
whatever the caller's own grants.
"""

from dataclasses import dataclass, field
from typing import FrozenSet
from uuid import UUID

from crm_auth.domain.entities import Organization, Role, Session, User
from crm_auth.libs.result import Error, Result, Return


@dataclass
class AuthContext:
    """Authenticated caller, resolved once per request"""

    user: User
    organization: Organization
    role: Role
    session: Session
    permissions: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def user_id(self) -> UUID:
        return self.user.id

    @property
    def organization_id(self) -> UUID:
        return self.organization.id

    @property
    def session_id(self) -> UUID:
        return self.session.id

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


def check_permission(ctx: AuthContext, permission: str) -> Result[None]:
    if not ctx.has_permission(permission):
        return Return.err(
            Error("INSUFFICIENT_PERMISSIONS", f"Missing required permission: {permission}")
        )
    return Return.ok(None)


def check_role_mutable(
    role: Role,
    rename: bool = False,
    describe: bool = False,
    change_permissions: bool = False,
    delete: bool = False,
) -> Result[None]:
    """Refuse any change to a default role"""
    if not role.is_default:
        return Return.ok(None)

    if rename:
        action = "rename"
    elif describe:
        action = "change the description of"
    elif change_permissions:
        action = "modify permissions of"
    elif delete:
        action = "delete"
    else:
        return Return.ok(None)

    return Return.err(
        Error("DEFAULT_ROLE_PROTECTED", f"Default role is protected: cannot {action} it")
    )
