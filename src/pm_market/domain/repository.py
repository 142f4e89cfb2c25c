# src/pm_market/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import Market


class MarketRepositoryProtocol(Protocol):
    async def list_active_markets(
        self,
        db: AsyncSession,
        exclude_ids: list[str],
    ) -> list[Market]: ...

    async def list_active_market_ids(self, db: AsyncSession) -> list[str]: ...

    async def list_voted_market_ids(
        self,
        db: AsyncSession,
        user_id: str,
    ) -> list[str]: ...

    async def get_market_by_id(
        self,
        db: AsyncSession,
        market_id: str,
    ) -> Market | None: ...

    async def list_top_markets(
        self,
        db: AsyncSession,
        limit: int,
    ) -> list[Market]: ...
