from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from crm_auth.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def list_active_by_user(self, user_id: UUID, now: datetime) -> List[Session]:
        """List non-revoked, unexpired sessions of a user, most recently used first"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def touch(self, session_id: UUID, at: datetime) -> None:
        """Update last_accessed_at"""
        pass

    @abstractmethod
    async def revoke_by_id(self, session_id: UUID, at: datetime) -> bool:
        """Revoke a specific session. Returns True if it was not revoked before."""
        pass

    @abstractmethod
    async def revoke_all_by_user_id(self, user_id: UUID, at: datetime) -> int:
        """Revoke all sessions of a user. Returns count of revoked sessions."""
        pass

    @abstractmethod
    async def revoke_all_except_session(
        self, user_id: UUID, session_id: UUID, at: datetime
    ) -> int:
        """Revoke all sessions of a user except the specified one. Returns count."""
        pass
