"""
Role Entity

Named bundle of permissions scoped to one organization.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow

DEFAULT_ROLE_NAME = "Admin"


class Role(SQLModel, table=True):
    """
    Role entity - permission bundle within an organization.

    Business Rules:
    - Exactly one default role per organization, created at registration
    - The default role holds every permission and cannot be renamed,
      deleted, or have its permissions changed
    - Names are unique among live roles of the same organization
    - Soft delete only, and only while no user is assigned
    """

    __tablename__ = "roles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    organization_id: UUID = Field(foreign_key="organizations.id", nullable=False, index=True)

    name: str = Field(max_length=100)
    # lowercased name, backs the per-organization uniqueness index
    name_key: str = Field(default="", max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_default: bool = Field(default=False)

    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index(
            "uq_role_organization_live_name",
            "organization_id",
            "name_key",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )
