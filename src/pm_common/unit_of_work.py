"""Unit of work — one session, one transaction.

Usage:
    uow = UnitOfWork()
    async with uow.begin() as db:
        await repo.do_something(db, ...)

Clean exit commits; any exception rolls back and propagates. Each call to
begin() opens a fresh session, so a failed attempt can be retried without
carrying state from the aborted transaction.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.pm_common.database import async_session_factory


class UnitOfWork:
    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] | None = None
    ) -> None:
        self._session_factory = session_factory or async_session_factory

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            async with session.begin():
                yield session


def get_unit_of_work() -> UnitOfWork:
    """FastAPI dependency: a UnitOfWork bound to the application engine."""
    return UnitOfWork()
