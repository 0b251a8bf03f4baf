"""
Organization Entity

The tenant: every user, role, session and invitation belongs to one.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow


class Organization(SQLModel, table=True):
    """
    Organization entity - isolated tenant workspace.

    Business Rules:
    - Slug is unique across all organizations
    - Soft delete: deleted_at hides the organization and everything in it
    - Created together with its default role and first user at registration
    """

    __tablename__ = "organizations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    slug: str = Field(unique=True, index=True, max_length=255)

    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_organization_deleted_at", "deleted_at"),)
