from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status

from crm_auth.api.error import to_http_error
from crm_auth.app.services.audit import AuditEmitter, RequestMeta
from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.app.use_cases.auth import RevokeSessionsResponse, SessionListResponse
from crm_auth.app.use_cases.sessions import ListSessionsUseCase, RevokeSessionsUseCase
from crm_auth.depends import (
    get_audit_emitter,
    get_auth_context,
    get_request_meta,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth/sessions", tags=["Sessions"])


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    ctx: AuthContext = Depends(get_auth_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """List the caller's active sessions; the current one is flagged"""
    result = await ListSessionsUseCase(uow).execute(ctx)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_specific_session(
    session_id: UUID,
    background_tasks: BackgroundTasks,
    ctx: AuthContext = Depends(get_auth_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Revoke one of the caller's other sessions (sign out a device).

    Raises:
        - 404 Not Found: Session missing, owned by someone else, or current
    """
    use_case = RevokeSessionsUseCase(uow, audit)
    result = await use_case.revoke_specific_session(ctx, session_id, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", response_model=RevokeSessionsResponse)
async def revoke_all_except_current(
    background_tasks: BackgroundTasks,
    ctx: AuthContext = Depends(get_auth_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Revoke every session of the caller except the current one"""
    use_case = RevokeSessionsUseCase(uow, audit)
    result = await use_case.revoke_all_except_current(ctx, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value
