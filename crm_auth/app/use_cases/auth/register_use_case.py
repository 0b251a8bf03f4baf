"""
Register Use Case

Bootstraps a new organization: organization, default Admin role with
every permission, first user, profile and email-verification token,
all in one transaction.
"""

import logging
from typing import Optional

from crm_auth.app.repositories.errors import UniqueConstraintViolation
from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.email_queue import EmailQueue
from crm_auth.app.services.security import hash_password
from crm_auth.app.services.settings import EMAIL_VERIFICATION_TTL, FRONTEND_URL
from crm_auth.app.services.token_manager import TokenManager
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.entities import (
    DEFAULT_ROLE_NAME,
    Organization,
    Profile,
    Role,
    TokenKind,
    User,
)
from crm_auth.libs.result import Error, Result, Return
from .dtos import RegisterCommand, RegisterResponse

logger = logging.getLogger(__name__)

REGISTER_CONFLICT = Error("CONFLICT", "Email or organization slug already in use")


class RegisterUseCase:
    """
    Use case for organization registration.

    Business Rules:
    - Email and slug uniqueness is enforced by database constraints at
      insert time, with no prior existence check; the loser of a
      concurrent registration gets CONFLICT
    - The default role is named "Admin" and is granted every permission
      currently in the catalogue
    - The user starts unverified and active
    - Nothing is observable unless every step commits
    - Email and audit dispatch happen only after commit
    """

    def __init__(self, uow: UnitOfWork, email_queue: EmailQueue, audit: AuditEmitter):
        self.uow = uow
        self.email_queue = email_queue
        self.audit = audit

    async def execute(
        self, command: RegisterCommand, meta: Optional[RequestMeta] = None
    ) -> Result[RegisterResponse]:
        email = command.email.strip().lower()
        password_hash = hash_password(command.password)

        async with self.uow:
            try:
                organization = await self.uow.organizations.create(
                    Organization(name=command.organization_name, slug=command.organization_slug)
                )
                role = await self.uow.roles.create(
                    Role(
                        organization_id=organization.id,
                        name=DEFAULT_ROLE_NAME,
                        description="Full access to the organization",
                        is_default=True,
                    )
                )
                permissions = await self.uow.permissions.list_all()
                await self.uow.roles.replace_permissions(role.id, [p.id for p in permissions])

                user = await self.uow.users.create(
                    User(
                        organization_id=organization.id,
                        role_id=role.id,
                        email=email,
                        password_hash=password_hash,
                        is_active=True,
                    )
                )
                await self.uow.profiles.create(
                    Profile(
                        user_id=user.id,
                        first_name=command.first_name,
                        last_name=command.last_name,
                    )
                )

                issued = await TokenManager(self.uow).issue(
                    TokenKind.email_verification, user.id, EMAIL_VERIFICATION_TTL
                )

                await self.uow.commit()
            except UniqueConstraintViolation:
                await self.uow.rollback()
                logger.info("Registration conflict for slug %s", command.organization_slug)
                return Return.err(REGISTER_CONFLICT)

            logger.info("Registered organization %s with user %s", organization.id, user.id)

            ctx = AuditContext.from_meta(meta, organization_id=organization.id, actor_id=user.id)
            self.audit.emit(
                ctx,
                AuditEntry(
                    AuditAction.ORGANIZATION_CREATE,
                    "organization",
                    organization.id,
                    metadata={"name": organization.name, "slug": organization.slug},
                ),
            )
            self.audit.emit(
                ctx,
                AuditEntry(
                    AuditAction.ROLE_CREATE,
                    "role",
                    role.id,
                    metadata={"name": role.name, "is_default": True},
                ),
            )
            self.audit.emit(
                ctx,
                AuditEntry(AuditAction.USER_CREATE, "user", user.id, metadata={"email": email}),
            )

            self.email_queue.queue_email_verification_email(
                to=email,
                first_name=command.first_name,
                org_name=organization.name,
                verify_url=f"{FRONTEND_URL}/verify-email?token={issued.raw_token}",
                expires_in_hours=int(EMAIL_VERIFICATION_TTL.total_seconds() // 3600),
            )

            return Return.ok(
                RegisterResponse(
                    message="Registration successful. Please check your email to verify your account.",
                    user_id=str(user.id),
                    organization_id=str(organization.id),
                )
            )
