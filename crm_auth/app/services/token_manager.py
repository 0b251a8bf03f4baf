"""
Token Lifecycle Manager

Issues and consumes the single-use tokens behind email verification,
password reset and invitations. Raw tokens leave the process exactly
once (in an email); only their SHA-256 hash is stored.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, TypeVar

from crm_auth.app.services.security import generate_token, hash_token, timing_safe_delay
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import TokenKind
from crm_auth.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass
class IssuedToken(Generic[R]):
    raw_token: str
    record: R


class TokenManager:
    """
    Business Rules:
    - Issuing invalidates every outstanding token of the same subject and
      kind, in the same transaction as the insert
    - Consumption is a conditional "set used_at where still unused" update;
      of two concurrent consumers exactly one wins
    - Unknown, invalidated, expired and used tokens yield distinct errors,
      each after the same timing padding
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def issue(
        self, kind: TokenKind, subject: Any, ttl: timedelta, **fields: Any
    ) -> IssuedToken:
        store = self.uow.token_store(kind)
        now = utcnow()

        invalidated = await store.invalidate_subject(subject, now)
        if invalidated:
            logger.debug("Invalidated %s previous %s token(s)", invalidated, kind.value)

        raw_token = generate_token()
        record = await store.insert(subject, hash_token(raw_token), now + ttl, **fields)
        return IssuedToken(raw_token=raw_token, record=record)

    async def consume(self, kind: TokenKind, raw_token: str) -> Result[Any]:
        store = self.uow.token_store(kind)

        record = await store.find_by_hash(hash_token(raw_token))
        if record is None or store.is_void(record):
            await timing_safe_delay()
            return Return.err(Error("INVALID_TOKEN", "Invalid or unknown token"))

        now = utcnow()
        if record.expires_at <= now:
            await timing_safe_delay()
            return Return.err(Error("TOKEN_EXPIRED", "Token has expired"))

        if record.used_at is not None or not await store.mark_used(record.id, now):
            await timing_safe_delay()
            return Return.err(Error("TOKEN_ALREADY_USED", "Token has already been used"))

        return Return.ok(record)
