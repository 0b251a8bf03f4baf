from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.base import utcnow
from crm_auth.libs.result import Result, Return
from .dtos import InvitationListItem, InvitationListResponse


class ListInvitationsUseCase:
    """Pending invitations of the caller's organization, newest first"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, ctx: AuthContext) -> Result[InvitationListResponse]:
        organization_id = ctx.organization_id

        async with self.uow:
            invitations = await self.uow.invitations.list_pending(organization_id, utcnow())
            return Return.ok(
                InvitationListResponse(
                    invitations=[
                        InvitationListItem(
                            id=str(inv.id),
                            email=inv.email,
                            role_id=str(inv.role_id),
                            invited_by_id=str(inv.invited_by_id),
                            expires_at=inv.expires_at,
                            created_at=inv.created_at,
                        )
                        for inv in invitations
                    ]
                )
            )
