"""
Audit Emitter

Use cases decide the content of an audit entry inside the operation
(so before/after snapshots are consistent) and hand it to an emitter.
Persistence happens outside the request transaction; a failed write is
logged and never reaches the caller.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from crm_auth.domain.entities import AuditLog


class AuditAction(str, Enum):
    AUTH_LOGIN = "auth:login"
    AUTH_LOGOUT = "auth:logout"
    AUTH_LOGIN_FAILED = "auth:login_failed"
    AUTH_PASSWORD_RESET_REQUEST = "auth:password_reset_request"
    AUTH_PASSWORD_RESET_COMPLETE = "auth:password_reset_complete"
    AUTH_PASSWORD_CHANGE = "auth:password_change"
    AUTH_EMAIL_VERIFY = "auth:email_verify"
    AUTH_EMAIL_VERIFY_RESEND = "auth:email_verify_resend"
    USER_CREATE = "user:create"
    USER_UPDATE = "user:update"
    ORGANIZATION_CREATE = "organization:create"
    ROLE_CREATE = "role:create"
    ROLE_UPDATE = "role:update"
    ROLE_DELETE = "role:delete"
    ROLE_PERMISSION_GRANT = "role:permission_grant"
    INVITATION_CREATE = "invitation:create"
    INVITATION_ACCEPT = "invitation:accept"
    INVITATION_REVOKE = "invitation:revoke"
    SESSION_REVOKE = "session:revoke"
    SESSION_REVOKE_ALL = "session:revoke_all"


@dataclass
class RequestMeta:
    """Transport details attached to every audit entry"""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_id: Optional[str] = None


@dataclass
class AuditContext:
    organization_id: Optional[UUID] = None
    actor_id: Optional[UUID] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    request_id: Optional[str] = None

    @classmethod
    def from_meta(
        cls,
        meta: Optional[RequestMeta],
        organization_id: Optional[UUID] = None,
        actor_id: Optional[UUID] = None,
    ) -> "AuditContext":
        meta = meta or RequestMeta()
        return cls(
            organization_id=organization_id,
            actor_id=actor_id,
            ip_address=meta.ip_address,
            user_agent=meta.user_agent,
            request_id=meta.request_id,
        )


@dataclass
class AuditEntry:
    action: AuditAction
    entity_type: str
    entity_id: Optional[Any] = None
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


SENSITIVE_KEYS = frozenset(
    {
        "password",
        "passwordhash",
        "password_hash",
        "token",
        "tokenhash",
        "token_hash",
        "secret",
        "apikey",
        "api_key",
        "authorization",
        "auth",
        "credential",
        "credentials",
        "bearer",
        "cookie",
        "creditcard",
        "credit_card",
        "ssn",
        "cvv",
        "privatekey",
        "private_key",
    }
)
SENSITIVE_PATTERNS = ("password", "token", "secret", "credential", "auth")

REDACTED = "[REDACTED]"
MAX_DEPTH = 10


def is_sensitive_key(key: str) -> bool:
    lower_key = key.lower()
    return lower_key in SENSITIVE_KEYS or any(p in lower_key for p in SENSITIVE_PATTERNS)


def redact_sensitive(value: Any, depth: int = 0) -> Any:
    """Recursively replace values under sensitive keys; JSON-friendly output"""
    if depth > MAX_DEPTH:
        return "[MAX_DEPTH]"
    if isinstance(value, dict):
        return {
            key: REDACTED if is_sensitive_key(str(key)) else redact_sensitive(item, depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple, set)):
        return [redact_sensitive(item, depth + 1) for item in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


def build_audit_log(ctx: AuditContext, entry: AuditEntry) -> AuditLog:
    changes = None
    if entry.before is not None or entry.after is not None:
        changes = redact_sensitive({"before": entry.before, "after": entry.after})

    return AuditLog(
        organization_id=ctx.organization_id,
        actor_id=ctx.actor_id,
        action=entry.action.value,
        entity_type=entry.entity_type,
        entity_id=str(entry.entity_id) if entry.entity_id is not None else None,
        changes=changes,
        event_metadata=redact_sensitive(entry.metadata) if entry.metadata else None,
        ip_address=ctx.ip_address,
        user_agent=ctx.user_agent,
        request_id=ctx.request_id,
    )


class AuditEmitter(ABC):
    """Fire-and-forget sink for audit entries"""

    @abstractmethod
    def emit(self, ctx: AuditContext, entry: AuditEntry) -> None:
        """Schedule the entry for persistence. Must never raise."""
        pass
