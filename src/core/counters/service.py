import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.counters.models import Counter
from src.core.exceptions import CounterUnavailableError, ValidationError

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE ... RETURNING
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class CounterService:
    """
    Durable named counters with an atomic increment-and-get.

    The increment is a single upsert statement, so concurrent callers are
    serialized by the database (row lock on PostgreSQL, write lock on SQLite)
    and never see the same value twice. The caller owns the transaction:
    the new value becomes durable when the session commits.
    """

    def __init__(self, session: AsyncSession, timeout: float | None = None):
        self.session = session
        self.timeout = settings.db_statement_timeout_seconds if timeout is None else timeout

    def _upsert_statement(self, name: str):
        dialect = self.session.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            logger.error("Counter %s: atomic upsert is not supported on %s", name, dialect)
            raise CounterUnavailableError(name)

        stmt = insert(Counter).values(name=name, value=1)
        return stmt.on_conflict_do_update(
            index_elements=[Counter.name],
            set_={"value": Counter.value + 1, "updated_at": func.now()},
        ).returning(Counter.value)

    async def increment_and_get(self, name: str) -> int:
        """
        Increment counter ``name`` by one and return the new value.

        A missing counter is created by the same statement, so the first call
        for a fresh series returns 1. Storage errors and timeouts roll the
        session back and raise CounterUnavailableError; nothing is retried.
        """
        if not name or not name.strip():
            raise ValidationError("Counter name is required", field="name")

        stmt = self._upsert_statement(name)
        try:
            async with asyncio.timeout(self.timeout):
                result = await self.session.execute(stmt)
                value = result.scalar_one()
        except (SQLAlchemyError, TimeoutError, OSError) as exc:
            logger.exception("Counter %s increment failed", name)
            await self.session.rollback()
            raise CounterUnavailableError(name) from exc

        logger.debug("Counter %s -> %d", name, value)
        return value

    async def current_value(self, name: str) -> int:
        """Last value issued for ``name``; 0 when the counter was never used."""
        result = await self.session.execute(select(Counter.value).where(Counter.name == name))
        value = result.scalar_one_or_none()
        return value or 0


async def increment_and_get(session: AsyncSession, name: str) -> int:
    """Convenience function to take the next value of a named counter."""
    return await CounterService(session).increment_and_get(name)
