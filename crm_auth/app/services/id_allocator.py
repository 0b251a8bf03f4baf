"""
Sequential ID Allocator

Mints human-readable codes such as ``ACC-0001``, one independent
sequence per (organization, entity type).
"""

from typing import Optional, Union
from uuid import UUID

from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.entities import EntityType

ENTITY_PREFIXES = {
    EntityType.account: "ACC",
    EntityType.agent: "AGT",
    EntityType.client: "CLT",
    EntityType.insurer: "INS",
}


def format_entity_code(prefix: str, value: int) -> str:
    return f"{prefix}-{value:04d}"


class IdAllocator:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def next_id(
        self,
        organization_id: UUID,
        entity_type: Union[EntityType, str],
        prefix: Optional[str] = None,
    ) -> str:
        """
        Allocate the next code inside the caller's transaction.

        The counter row is incremented by one atomic upsert; if the
        surrounding transaction rolls back, so does the increment.
        """
        if prefix is None:
            prefix = ENTITY_PREFIXES[EntityType(entity_type)]
        key = entity_type.value if isinstance(entity_type, EntityType) else entity_type

        value = await self.uow.id_counters.increment(organization_id, key)
        return format_entity_code(prefix, value)
