"""
AuditLog Entity

Immutable log of security-relevant actions.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from ..base import utcnow


class AuditLog(SQLModel, table=True):
    """
    AuditLog entity - one row per emitted audit event.

    Business Rules:
    - Immutable (never updated or deleted)
    - Sensitive values are redacted before they are stored
    - organization_id and actor_id are nullable for anonymous events
    """

    __tablename__ = "audit_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    organization_id: Optional[UUID] = Field(default=None, index=True)
    actor_id: Optional[UUID] = Field(default=None, index=True)

    action: str = Field(max_length=100)  # e.g., "auth:login"
    entity_type: str = Field(max_length=50)
    entity_id: Optional[str] = Field(default=None, max_length=64)

    changes: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)
    request_id: Optional[str] = Field(default=None, max_length=100)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_log_created_at", "created_at"),
        Index("idx_audit_log_organization_action", "organization_id", "action"),
    )
