from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional
from uuid import UUID


class TokenStore(ABC):
    """
    Storage contract for single-use hashed tokens.

    A subject identifies who a token is for: a user id for email
    verification and password reset, an (organization id, email) pair
    for invitations.
    """

    @abstractmethod
    async def invalidate_subject(self, subject: Any, at: datetime) -> int:
        """Invalidate every outstanding token of the subject. Returns count."""
        pass

    @abstractmethod
    async def insert(
        self, subject: Any, token_hash: str, expires_at: datetime, **fields: Any
    ) -> Any:
        """Persist a new token record for the subject"""
        pass

    @abstractmethod
    async def find_by_hash(self, token_hash: str) -> Optional[Any]:
        """Get token record by its hash"""
        pass

    @abstractmethod
    async def mark_used(self, record_id: UUID, at: datetime) -> bool:
        """Set used_at only if the record is still unused. Returns True on success."""
        pass

    def is_void(self, record: Any) -> bool:
        """Whether a record was invalidated by some means other than use"""
        return False
