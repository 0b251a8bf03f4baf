"""
Login Use Case

Authenticates email/password and opens a cookie-backed session.
"""

import logging
from typing import Optional

from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.email_queue import EmailQueue
from crm_auth.app.services.security import burn_password_check, verify_password
from crm_auth.app.services.session_manager import SessionManager
from crm_auth.app.services.settings import (
    LOCKOUT_DURATION,
    MAX_FAILED_LOGIN_ATTEMPTS,
    REMEMBER_ME_DURATION,
    SESSION_DURATION,
    SUPPORT_EMAIL,
)
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.base import utcnow
from crm_auth.libs.result import Error, Result, Return
from .dtos import LoginResponse, LoginResult, build_auth_user

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = Error("INVALID_CREDENTIALS", "Invalid email or password")


class LoginUseCase:
    """
    Use case for user login.

    Business Rules:
    - Unknown, deleted, locked and password-less accounts all get the
      same generic error as a wrong password, after a comparable delay
    - Each wrong password increments failed attempts atomically; reaching
      the limit locks the account and queues an account-locked email
    - Email verification and active status are checked only after the
      password is correct
    - Success resets the lockout state and creates the session in one
      transaction
    """

    def __init__(self, uow: UnitOfWork, email_queue: EmailQueue, audit: AuditEmitter):
        self.uow = uow
        self.email_queue = email_queue
        self.audit = audit

    async def execute(
        self,
        email: str,
        password: str,
        remember_me: bool = False,
        meta: Optional[RequestMeta] = None,
    ) -> Result[LoginResult]:
        email = email.strip().lower()
        ctx = AuditContext.from_meta(meta)

        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            if user is None:
                burn_password_check(password)
                self._login_failed(ctx, None, {"email": email, "reason": "user_not_found"})
                return Return.err(INVALID_CREDENTIALS)

            ctx.organization_id = user.organization_id
            now = utcnow()

            if user.is_locked(now):
                burn_password_check(password)
                remaining = int((user.locked_until - now).total_seconds() // 60) + 1
                self._login_failed(
                    ctx, user.id, {"reason": "account_locked", "remaining_min": remaining}
                )
                return Return.err(INVALID_CREDENTIALS)

            if not user.password_hash:
                burn_password_check(password)
                self._login_failed(ctx, user.id, {"reason": "no_password"})
                return Return.err(INVALID_CREDENTIALS)

            if not verify_password(password, user.password_hash):
                await self._record_failure(ctx, user, now)
                return Return.err(INVALID_CREDENTIALS)

            if not user.is_email_verified:
                self._login_failed(ctx, user.id, {"reason": "email_not_verified"})
                return Return.err(
                    Error("EMAIL_NOT_VERIFIED", "Please verify your email before logging in")
                )

            if not user.is_active:
                self._login_failed(ctx, user.id, {"reason": "account_inactive"})
                return Return.err(Error("ACCOUNT_INACTIVE", "Account has been deactivated"))

            organization = await self.uow.organizations.get_by_id(user.organization_id)
            role = await self.uow.roles.get_by_id(user.role_id, user.organization_id)
            if organization is None or role is None:
                return Return.err(INVALID_CREDENTIALS)

            duration = REMEMBER_ME_DURATION if remember_me else SESSION_DURATION
            await self.uow.users.reset_login_state(user.id, now)
            issued = await SessionManager(self.uow).create(
                user.id,
                organization.id,
                duration,
                ip_address=ctx.ip_address,
                user_agent=ctx.user_agent,
            )

            profile = await self.uow.profiles.get_by_user_id(user.id)
            permissions = await self.uow.roles.get_permissions(role.id)

            await self.uow.commit()

            ctx.actor_id = user.id
            self.audit.emit(ctx, AuditEntry(AuditAction.AUTH_LOGIN, "user", user.id))
            logger.info("User %s logged in to organization %s", user.id, organization.id)

            return Return.ok(
                LoginResult(
                    response=LoginResponse(
                        user=build_auth_user(user, profile, organization, role),
                        permissions=[p.name for p in permissions],
                    ),
                    cookie_value=issued.cookie_value,
                    max_age_seconds=int(duration.total_seconds()),
                )
            )

    async def _record_failure(self, ctx: AuditContext, user, now) -> None:
        attempts = await self.uow.users.record_failed_login(user.id)
        locked = attempts >= MAX_FAILED_LOGIN_ATTEMPTS
        unlock_at = now + LOCKOUT_DURATION
        if locked:
            await self.uow.users.lock(user.id, unlock_at)
        await self.uow.commit()

        self._login_failed(
            ctx,
            user.id,
            {"reason": "invalid_password", "attempts": attempts, "locked": locked},
        )

        if locked:
            logger.warning("Account %s locked after %s failed attempts", user.id, attempts)
            organization = await self.uow.organizations.get_by_id(user.organization_id)
            profile = await self.uow.profiles.get_by_user_id(user.id)
            self.email_queue.queue_account_locked_email(
                to=user.email,
                first_name=profile.first_name if profile else "User",
                org_name=organization.name if organization else "",
                unlock_at=unlock_at.isoformat() + "Z",
                support_email=SUPPORT_EMAIL,
            )

    def _login_failed(self, ctx: AuditContext, user_id, metadata: dict) -> None:
        self.audit.emit(
            ctx,
            AuditEntry(AuditAction.AUTH_LOGIN_FAILED, "user", user_id, metadata=metadata),
        )
