"""
IdCounter Entity

Per-organization sequence backing human-readable entity codes.
"""

from uuid import UUID

from sqlmodel import Field, SQLModel


class IdCounter(SQLModel, table=True):
    """
    IdCounter entity - last value handed out for (organization, entity type).

    Business Rules:
    - One row per (organization, entity type), created lazily on first use
    - Incremented only by an atomic upsert, so values never repeat
    """

    __tablename__ = "id_counters"

    organization_id: UUID = Field(foreign_key="organizations.id", primary_key=True)
    entity_type: str = Field(primary_key=True, max_length=50)
    last_value: int = Field(default=0)
