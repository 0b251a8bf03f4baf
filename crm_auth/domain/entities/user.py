"""
User Entity

Represents a person belonging to exactly one organization.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow


class User(SQLModel, table=True):
    """
    User entity - a member of one organization holding one role.

    Business Rules:
    - Email is stored lowercased and unique across all users
    - Email verification required before login
    - Password stored as bcrypt hash
    - Repeated failed logins lock the account for a while
    - Inactive or soft-deleted users cannot authenticate
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    organization_id: UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    role_id: UUID = Field(foreign_key="roles.id", nullable=False, index=True)

    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: Optional[str] = Field(default=None, max_length=60)  # Bcrypt output is 60 chars

    is_active: bool = Field(default=True)
    email_verified_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Lockout
    failed_login_attempts: int = Field(default=0)
    locked_until: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    password_changed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_deleted_at", "deleted_at"),)

    @property
    def is_email_verified(self) -> bool:
        return self.email_verified_at is not None

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and self.locked_until > now
