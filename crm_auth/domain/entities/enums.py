"""
CRM Auth Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class TokenKind(str, Enum):
    """Kind of single-use token"""

    email_verification = "email_verification"
    password_reset = "password_reset"
    invitation = "invitation"


class InvitationStatus(str, Enum):
    """Invitation status, derived from the invitation timestamps"""

    pending = "pending"
    accepted = "accepted"
    revoked = "revoked"
    expired = "expired"


class SessionState(str, Enum):
    """Outcome of validating a session cookie"""

    active = "active"
    expired = "expired"
    revoked = "revoked"
    invalid = "invalid"


class EntityType(str, Enum):
    """Business entities that receive sequential per-organization codes"""

    account = "account"
    agent = "agent"
    client = "client"
    insurer = "insurer"
