"""
Permission and RolePermission Entities

Global permission catalogue and the role-to-permission link table.
"""

from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class Permission(SQLModel, table=True):
    """
    Permission entity - a named capability such as ``roles:write``.

    Business Rules:
    - Names follow ``resource:action`` and are unique
    - The catalogue is global, shared by all organizations
    """

    __tablename__ = "permissions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(unique=True, index=True, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)


class RolePermission(SQLModel, table=True):
    __tablename__ = "role_permissions"

    role_id: UUID = Field(foreign_key="roles.id", primary_key=True)
    permission_id: UUID = Field(foreign_key="permissions.id", primary_key=True)
