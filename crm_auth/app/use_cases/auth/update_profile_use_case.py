import logging
from typing import Optional

from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.entities import Profile
from crm_auth.libs.result import Result, Return
from .dtos import ProfileResponse, UpdateProfileCommand, build_profile_info

logger = logging.getLogger(__name__)


class UpdateProfileUseCase:
    """
    Partial update of the caller's profile.

    Only fields present in the command are written; the audit entry
    records the profile before and after the change.
    """

    def __init__(self, uow: UnitOfWork, audit: AuditEmitter):
        self.uow = uow
        self.audit = audit

    async def execute(
        self, ctx: AuthContext, command: UpdateProfileCommand, meta: Optional[RequestMeta] = None
    ) -> Result[ProfileResponse]:
        user_id, organization_id = ctx.user_id, ctx.organization_id
        changes = {
            field: value
            for field, value in command.model_dump(include=command.model_fields_set).items()
            if value is not None or field == "phone"
        }

        async with self.uow:
            profile = await self.uow.profiles.get_by_user_id(user_id)
            if profile is None:
                profile = await self.uow.profiles.create(
                    Profile(user_id=user_id, first_name="", last_name="")
                )

            before = build_profile_info(profile).model_dump()
            for field, value in changes.items():
                setattr(profile, field, value)
            profile = await self.uow.profiles.update(profile)
            after = build_profile_info(profile)

            await self.uow.commit()

        self.audit.emit(
            AuditContext.from_meta(meta, organization_id, user_id),
            AuditEntry(
                AuditAction.USER_UPDATE,
                "profile",
                user_id,
                before=before,
                after=after.model_dump(),
            ),
        )
        logger.info("Profile updated for user %s", user_id)
        return Return.ok(ProfileResponse(profile=after))
