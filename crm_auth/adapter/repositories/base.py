from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.app.repositories.errors import UniqueConstraintViolation


async def flush_unique(session: AsyncSession) -> None:
    """Flush pending inserts, translating constraint failures for the app layer."""
    try:
        await session.flush()
    except IntegrityError as exc:
        raise UniqueConstraintViolation(str(exc.orig)) from exc
