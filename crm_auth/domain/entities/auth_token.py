"""
AuthToken Entity

Single-use email verification and password reset tokens.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow
from .enums import TokenKind


class AuthToken(SQLModel, table=True):
    """
    AuthToken entity - hashed single-use token bound to a user.

    Business Rules:
    - Only the SHA-256 of the raw token is stored
    - Issuing a new token deletes the user's previous tokens of the same kind
    - Consumption sets used_at exactly once
    """

    __tablename__ = "auth_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False)
    kind: TokenKind = Field(nullable=False)
    token_hash: str = Field(unique=True, index=True, max_length=64)

    used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_auth_token_user_kind", "user_id", "kind"),)
