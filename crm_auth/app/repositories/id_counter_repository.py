from abc import ABC, abstractmethod
from uuid import UUID


class IIdCounterRepository(ABC):
    """IdCounter repository interface - application layer"""

    @abstractmethod
    async def increment(self, organization_id: UUID, entity_type: str) -> int:
        """Atomically create-or-increment the counter. Returns the new value."""
        pass
