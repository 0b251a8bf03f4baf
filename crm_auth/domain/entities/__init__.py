"""
CRM Auth Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    EntityType,
    InvitationStatus,
    SessionState,
    TokenKind,
)

# Export all entities
from .organization import Organization
from .role import DEFAULT_ROLE_NAME, Role
from .permission import Permission, RolePermission
from .user import User
from .profile import Profile
from .session import Session
from .auth_token import AuthToken
from .invitation import Invitation
from .id_counter import IdCounter
from .audit_log import AuditLog

__all__ = [
    # Enums
    "EntityType",
    "InvitationStatus",
    "SessionState",
    "TokenKind",
    # Entities
    "Organization",
    "Role",
    "DEFAULT_ROLE_NAME",
    "Permission",
    "RolePermission",
    "User",
    "Profile",
    "Session",
    "AuthToken",
    "Invitation",
    "IdCounter",
    "AuditLog",
]
