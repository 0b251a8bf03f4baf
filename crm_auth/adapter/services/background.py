"""
Fire-and-forget dispatch on Starlette background tasks.

Jobs run after the response has been produced, outside the request
transaction. Each job is wrapped so a failure is logged and dropped.
"""

import logging
from typing import Any, Awaitable, Callable, List

from sqlalchemy.orm import sessionmaker
from starlette.background import BackgroundTasks

from crm_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from crm_auth.app.services.audit import AuditContext, AuditEmitter, AuditEntry, build_audit_log
from crm_auth.app.services.email_queue import EmailMessage, EmailQueue
from crm_auth.domain.entities import AuditLog

logger = logging.getLogger(__name__)


async def run_safely(job_name: str, func: Callable[..., Awaitable[Any]], *args: Any) -> None:
    try:
        await func(*args)
    except Exception:
        logger.exception("Background job %s failed", job_name)


class LoggingEmailSender:
    """Default delivery backend: logs the message and keeps it in an outbox."""

    def __init__(self):
        self.outbox: List[EmailMessage] = []

    async def send(self, message: EmailMessage) -> None:
        logger.info("Sending %s email to %s", message.template, message.to)
        self.outbox.append(message)


class BackgroundEmailQueue(EmailQueue):
    def __init__(self, background_tasks: BackgroundTasks, sender: LoggingEmailSender):
        self.background_tasks = background_tasks
        self.sender = sender

    def enqueue(self, message: EmailMessage) -> None:
        self.background_tasks.add_task(
            run_safely, f"email:{message.template}", self.sender.send, message
        )


async def write_audit_log(session_factory: sessionmaker, audit_log: AuditLog) -> None:
    async with session_factory() as session:
        async with SqlAlchemyUnitOfWork(session) as uow:
            await uow.audit_logs.create(audit_log)
            await uow.commit()


class BackgroundAuditEmitter(AuditEmitter):
    def __init__(self, background_tasks: BackgroundTasks, session_factory: sessionmaker):
        self.background_tasks = background_tasks
        self.session_factory = session_factory

    def emit(self, ctx: AuditContext, entry: AuditEntry) -> None:
        try:
            audit_log = build_audit_log(ctx, entry)
        except Exception:
            logger.exception("Could not build audit entry for %s", entry.action)
            return

        self.background_tasks.add_task(
            run_safely,
            f"audit:{audit_log.action}",
            write_audit_log,
            self.session_factory,
            audit_log,
        )
