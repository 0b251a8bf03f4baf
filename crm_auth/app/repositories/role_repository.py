from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from crm_auth.domain.entities import Permission, Role


class IRoleRepository(ABC):
    """Role repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, role_id: UUID, organization_id: UUID) -> Optional[Role]:
        """Get a live role by ID within an organization"""
        pass

    @abstractmethod
    async def list_with_user_counts(self, organization_id: UUID) -> List[Tuple[Role, int]]:
        """List live roles of an organization with their assigned user counts"""
        pass

    @abstractmethod
    async def name_taken(
        self, organization_id: UUID, name: str, exclude_role_id: Optional[UUID] = None
    ) -> bool:
        """Check whether a live role of the organization already uses the name"""
        pass

    @abstractmethod
    async def create(self, role: Role) -> Role:
        """Create a new role. Raises UniqueConstraintViolation on a taken name"""
        pass

    @abstractmethod
    async def update(self, role: Role) -> Role:
        """Update existing role. Raises UniqueConstraintViolation on a taken name"""
        pass

    @abstractmethod
    async def soft_delete(self, role_id: UUID, at: datetime) -> bool:
        """Soft delete a role. Returns True if it was live."""
        pass

    @abstractmethod
    async def count_users(self, role_id: UUID) -> int:
        """Count live users assigned to a role"""
        pass

    @abstractmethod
    async def get_permissions(self, role_id: UUID) -> List[Permission]:
        """Get permissions granted to a role, ordered by name"""
        pass

    @abstractmethod
    async def replace_permissions(self, role_id: UUID, permission_ids: List[UUID]) -> None:
        """Replace the full permission set of a role"""
        pass
