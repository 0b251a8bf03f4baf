"""
Accept Invitation Use Case

Turns a pending invitation into a new user of the inviting organization.
"""

import logging
from typing import Optional

from crm_auth.app.repositories.errors import UniqueConstraintViolation
from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.security import hash_password, timing_safe_delay
from crm_auth.app.services.token_manager import TokenManager
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import Profile, TokenKind, User
from crm_auth.libs.result import Error, Result, Return
from .dtos import AcceptInvitationCommand, AcceptInvitationResponse

logger = logging.getLogger(__name__)

EMAIL_TAKEN = Error("EMAIL_ALREADY_EXISTS", "Email already registered")


class AcceptInvitationUseCase:
    """
    Use case for accepting an invitation.

    Business Rules:
    - Consuming the token, creating the user and profile, and marking the
      invitation accepted commit together or not at all
    - The user gets the invitation's organization and role
    - The email counts as verified, since the link was delivered to it
    - An email registered after the invitation was sent yields a conflict
      and leaves the invitation usable
    """

    def __init__(self, uow: UnitOfWork, audit: AuditEmitter):
        self.uow = uow
        self.audit = audit

    async def execute(
        self, command: AcceptInvitationCommand, meta: Optional[RequestMeta] = None
    ) -> Result[AcceptInvitationResponse]:
        password_hash = hash_password(command.password)

        async with self.uow:
            consumed = await TokenManager(self.uow).consume(TokenKind.invitation, command.token)
            if consumed.is_err():
                return Return.err(consumed.error)
            invitation = consumed.value

            organization = await self.uow.organizations.get_by_id(invitation.organization_id)
            role = await self.uow.roles.get_by_id(invitation.role_id, invitation.organization_id)
            if organization is None or role is None:
                await timing_safe_delay()
                return Return.err(Error("INVALID_TOKEN", "Invalid or unknown token"))

            if await self.uow.users.email_exists(invitation.email):
                return Return.err(EMAIL_TAKEN)

            now = utcnow()
            try:
                user = await self.uow.users.create(
                    User(
                        organization_id=organization.id,
                        role_id=role.id,
                        email=invitation.email,
                        password_hash=password_hash,
                        email_verified_at=now,
                        is_active=True,
                    )
                )
            except UniqueConstraintViolation:
                await self.uow.rollback()
                return Return.err(EMAIL_TAKEN)

            await self.uow.profiles.create(
                Profile(user_id=user.id, first_name=command.first_name, last_name=command.last_name)
            )
            await self.uow.invitations.mark_accepted(invitation.id, now)

            await self.uow.commit()

        self.audit.emit(
            AuditContext.from_meta(meta, organization.id, user.id),
            AuditEntry(
                AuditAction.INVITATION_ACCEPT,
                "invitation",
                invitation.id,
                metadata={"email": invitation.email, "user_id": str(user.id)},
            ),
        )
        logger.info("Invitation %s accepted by new user %s", invitation.id, user.id)

        return Return.ok(
            AcceptInvitationResponse(
                message="Invitation accepted. You can now log in.",
                user_id=str(user.id),
                organization_id=str(organization.id),
            )
        )
