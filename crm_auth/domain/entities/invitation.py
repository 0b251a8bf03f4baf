"""
Invitation Entity

Invitations to join an organization with a given role.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow
from .enums import InvitationStatus


class Invitation(SQLModel, table=True):
    """
    Invitation entity - single-use invitation token for an email address.

    Business Rules:
    - Expires after 48 hours
    - Token is single-use; only its SHA-256 hash is stored
    - Cannot target the default role or an email that already has an account
    - At most one pending invitation per (organization, email)
    - Status is derived from the timestamps, never stored
    """

    __tablename__ = "invitations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    organization_id: UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    email: str = Field(max_length=255, nullable=False, index=True)
    role_id: UUID = Field(foreign_key="roles.id", nullable=False)
    invited_by_id: UUID = Field(foreign_key="users.id", nullable=False)

    token_hash: str = Field(unique=True, index=True, max_length=64)  # SHA-256 hash

    # Timestamps
    used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    accepted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_invitation_expires_at", "expires_at"),
        Index("idx_invitation_organization_email", "organization_id", "email"),
    )

    def status(self, now: datetime) -> InvitationStatus:
        if self.accepted_at is not None:
            return InvitationStatus.accepted
        if self.revoked_at is not None:
            return InvitationStatus.revoked
        if self.expires_at <= now:
            return InvitationStatus.expired
        return InvitationStatus.pending
