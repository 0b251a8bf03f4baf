from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field

from crm_auth.api.error import to_http_error
from crm_auth.app.services.audit import AuditEmitter, RequestMeta
from crm_auth.app.services.email_queue import EmailQueue
from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.app.use_cases.invitations import (
    AcceptInvitationCommand,
    AcceptInvitationResponse,
    AcceptInvitationUseCase,
    CreateInvitationUseCase,
    InvitationListResponse,
    InvitationResponse,
    ListInvitationsUseCase,
    RevokeInvitationUseCase,
)
from crm_auth.depends import (
    get_audit_emitter,
    get_email_queue,
    get_request_meta,
    get_unit_of_work,
    require_permission,
)

router = APIRouter(prefix="/auth", tags=["Invitations"])


class InviteRequest(BaseModel):
    email: EmailStr = Field(..., description="Email address to invite")
    role_id: UUID = Field(..., description="Role the invitee receives on acceptance")


class AcceptInvitationRequest(BaseModel):
    """
    Accept invitation HTTP request payload

    The invitee picks a password and names; the email comes from the invitation.
    """

    token: str = Field(..., min_length=1, description="Invitation token")
    password: str = Field(..., min_length=8, max_length=72)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


@router.post("/invite", status_code=status.HTTP_201_CREATED, response_model=InvitationResponse)
async def create_invitation(
    request: InviteRequest,
    background_tasks: BackgroundTasks,
    ctx: AuthContext = Depends(require_permission("invitations:create")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_queue: EmailQueue = Depends(get_email_queue),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Invite someone to the caller's organization.

    Raises:
        - 403 Forbidden: Missing permission, or inviting to the default role
        - 404 Not Found: Role not in this organization
        - 409 Conflict: Email already registered, or invitation already pending
    """
    use_case = CreateInvitationUseCase(uow, email_queue, audit)
    result = await use_case.execute(ctx, request.email, request.role_id, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value


@router.post("/accept-invitation", response_model=AcceptInvitationResponse)
async def accept_invitation(
    request: AcceptInvitationRequest,
    background_tasks: BackgroundTasks,
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Accept an invitation and create the invitee's account.

    Raises:
        - 401 Unauthorized: Invalid, expired, revoked or already used token
        - 409 Conflict: Email registered since the invitation was sent
    """
    command = AcceptInvitationCommand(**request.model_dump())
    result = await AcceptInvitationUseCase(uow, audit).execute(command, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value


@router.get("/invitations", response_model=InvitationListResponse)
async def list_invitations(
    ctx: AuthContext = Depends(require_permission("invitations:read")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await ListInvitationsUseCase(uow).execute(ctx)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.delete("/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_invitation(
    invitation_id: UUID,
    background_tasks: BackgroundTasks,
    ctx: AuthContext = Depends(require_permission("invitations:delete")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Revoke a pending invitation. Revoking a non-pending one is a no-op.

    Raises:
        - 404 Not Found: Invitation not in this organization
    """
    result = await RevokeInvitationUseCase(uow, audit).execute(ctx, invitation_id, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
