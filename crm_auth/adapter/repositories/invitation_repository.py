from datetime import datetime
from typing import Any, List, Optional, Tuple
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.app.repositories.invitation_repository import IInvitationRepository
from crm_auth.domain.entities import Invitation


class InvitationRepository(IInvitationRepository):
    """Invitation repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, invitation_id: UUID, organization_id: UUID) -> Optional[Invitation]:
        """Get invitation by ID"""
        stmt = select(Invitation).where(
            Invitation.id == invitation_id, Invitation.organization_id == organization_id
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_pending(
        self, organization_id: UUID, email: str, now: datetime
    ) -> Optional[Invitation]:
        stmt = (
            self._pending(now)
            .where(Invitation.organization_id == organization_id, Invitation.email == email)
            .order_by(Invitation.created_at.desc())
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def list_pending(self, organization_id: UUID, now: datetime) -> List[Invitation]:
        stmt = (
            self._pending(now)
            .where(Invitation.organization_id == organization_id)
            .order_by(Invitation.created_at.desc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def invalidate_subject(self, subject: Tuple[UUID, str], at: datetime) -> int:
        """Revoke earlier live invitations for the same (organization, email)"""
        organization_id, email = subject
        stmt = (
            update(Invitation)
            .where(
                Invitation.organization_id == organization_id,
                Invitation.email == email,
                Invitation.accepted_at.is_(None),
                Invitation.revoked_at.is_(None),
            )
            .values(revoked_at=at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def insert(
        self, subject: Tuple[UUID, str], token_hash: str, expires_at: datetime, **fields: Any
    ) -> Invitation:
        """Create a new invitation"""
        organization_id, email = subject
        invitation = Invitation(
            organization_id=organization_id,
            email=email,
            token_hash=token_hash,
            expires_at=expires_at,
            **fields,
        )
        self.session.add(invitation)
        await self.session.flush()
        await self.session.refresh(invitation)
        return invitation

    async def find_by_hash(self, token_hash: str) -> Optional[Invitation]:
        stmt = select(Invitation).where(Invitation.token_hash == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def mark_used(self, record_id: UUID, at: datetime) -> bool:
        stmt = (
            update(Invitation)
            .where(
                Invitation.id == record_id,
                Invitation.used_at.is_(None),
                Invitation.revoked_at.is_(None),
            )
            .values(used_at=at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    def is_void(self, record: Invitation) -> bool:
        return record.revoked_at is not None

    async def mark_accepted(self, invitation_id: UUID, at: datetime) -> None:
        stmt = update(Invitation).where(Invitation.id == invitation_id).values(accepted_at=at)
        await self.session.execute(stmt)

    async def revoke(self, invitation_id: UUID, at: datetime) -> bool:
        stmt = (
            update(Invitation)
            .where(
                Invitation.id == invitation_id,
                Invitation.accepted_at.is_(None),
                Invitation.revoked_at.is_(None),
            )
            .values(revoked_at=at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    @staticmethod
    def _pending(now: datetime):
        return select(Invitation).where(
            Invitation.accepted_at.is_(None),
            Invitation.revoked_at.is_(None),
            Invitation.used_at.is_(None),
            Invitation.expires_at > now,
        )
