from abc import abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from crm_auth.app.repositories.token_store import TokenStore
from crm_auth.domain.entities import Invitation


class IInvitationRepository(TokenStore):
    """Invitation repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, invitation_id: UUID, organization_id: UUID) -> Optional[Invitation]:
        """Get invitation by ID within an organization"""
        pass

    @abstractmethod
    async def get_pending(
        self, organization_id: UUID, email: str, now: datetime
    ) -> Optional[Invitation]:
        """Get the pending invitation for an email, if any"""
        pass

    @abstractmethod
    async def list_pending(self, organization_id: UUID, now: datetime) -> List[Invitation]:
        """List pending invitations of an organization, newest first"""
        pass

    @abstractmethod
    async def mark_accepted(self, invitation_id: UUID, at: datetime) -> None:
        """Record acceptance of an already consumed invitation"""
        pass

    @abstractmethod
    async def revoke(self, invitation_id: UUID, at: datetime) -> bool:
        """Revoke an invitation unless already accepted or revoked. Returns True if revoked."""
        pass
