"""
Session Entity

Server-side record behind the opaque session cookie.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow


class Session(SQLModel, table=True):
    """
    Session entity - one per successful login.

    Business Rules:
    - The cookie carries the session id and a random secret; only the
      SHA-256 of the secret is stored
    - Expires after 24 hours, or 30 days with "remember me"
    - Revocation is a soft mark and is never undone
    - last_accessed_at is refreshed at most every few minutes
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    organization_id: UUID = Field(foreign_key="organizations.id", nullable=False, index=True)

    secret_hash: str = Field(max_length=64)  # SHA-256 hex
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_accessed_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_revoked", "user_id", "revoked_at"),
    )
