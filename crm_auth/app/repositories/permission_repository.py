from abc import ABC, abstractmethod
from typing import Dict, List
from uuid import UUID

from crm_auth.domain.entities import Permission


class IPermissionRepository(ABC):
    """Permission repository interface - application layer"""

    @abstractmethod
    async def list_all(self) -> List[Permission]:
        """List the whole permission catalogue ordered by name"""
        pass

    @abstractmethod
    async def get_by_ids(self, permission_ids: List[UUID]) -> List[Permission]:
        """Get permissions whose IDs are in the list"""
        pass

    @abstractmethod
    async def ensure_catalogue(self, catalogue: Dict[str, str]) -> int:
        """Insert missing permissions from a name->description map. Returns count added."""
        pass
