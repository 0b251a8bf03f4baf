from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from crm_auth.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a live user of a live organization by (lowercased) email"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a live user by ID"""
        pass

    @abstractmethod
    async def email_exists(self, email: str) -> bool:
        """Check whether any user row, deleted or not, holds the email"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def record_failed_login(self, user_id: UUID) -> int:
        """Atomically increment failed login attempts. Returns the new count."""
        pass

    @abstractmethod
    async def lock(self, user_id: UUID, until: datetime) -> None:
        """Lock the user out until the given time"""
        pass

    @abstractmethod
    async def reset_login_state(self, user_id: UUID, at: datetime) -> None:
        """Clear failed attempts and lock, and record the login time"""
        pass

    @abstractmethod
    async def mark_email_verified(self, user_id: UUID, at: datetime) -> bool:
        """Set email_verified_at if not set yet. Returns True if it changed."""
        pass

    @abstractmethod
    async def set_password(self, user_id: UUID, password_hash: str, at: datetime) -> None:
        """Replace the password hash and record the change time"""
        pass
