from typing import Optional

from fastapi import BackgroundTasks, Depends, Request
from sqlalchemy.orm import sessionmaker

from config import ApplicationConfig
from crm_auth.adapter.services.background import (
    BackgroundAuditEmitter,
    BackgroundEmailQueue,
    LoggingEmailSender,
)
from crm_auth.adapter.services.database import database
from crm_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from crm_auth.api.error import to_http_error
from crm_auth.app.services.audit import AuditEmitter, RequestMeta
from crm_auth.app.services.email_queue import EmailQueue
from crm_auth.app.services.rbac import AuthContext, check_permission
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.app.use_cases.auth import AuthenticateUseCase

email_sender = LoggingEmailSender()


async def get_session_factory() -> sessionmaker:
    return database.session_factory


async def get_unit_of_work(session_factory: sessionmaker = Depends(get_session_factory)):
    async with session_factory() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_email_queue(background_tasks: BackgroundTasks) -> EmailQueue:
    return BackgroundEmailQueue(background_tasks, email_sender)


def get_audit_emitter(
    background_tasks: BackgroundTasks,
    session_factory: sessionmaker = Depends(get_session_factory),
) -> AuditEmitter:
    return BackgroundAuditEmitter(background_tasks, session_factory)


def get_request_meta(request: Request) -> RequestMeta:
    forwarded_for: Optional[str] = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None

    return RequestMeta(
        ip_address=ip_address,
        user_agent=request.headers.get("user-agent"),
        request_id=request.headers.get("x-request-id"),
    )


async def get_auth_context(
    request: Request, uow: UnitOfWork = Depends(get_unit_of_work)
) -> AuthContext:
    """
    Dependency resolving the session cookie into the caller's context.

    Raises:
        ClientError: 401 if the session is missing, invalid, expired or
            revoked; 403 if the account is inactive
    """
    cookie_value = request.cookies.get(ApplicationConfig.SESSION_COOKIE_NAME)
    result = await AuthenticateUseCase(uow).execute(cookie_value)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


def require_permission(permission: str):
    """Dependency factory gating a route behind one permission"""

    async def dependency(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
        result = check_permission(ctx, permission)
        if result.is_err():
            raise to_http_error(result.error)
        return ctx

    return dependency
