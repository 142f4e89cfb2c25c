"""MarketApplicationService — thin composition layer.

All methods are read-only; no commit/rollback needed.
The caller (router) passes db session; service delegates to repository.
Only active markets are browsable or ranked; detail works for any market.
"""

import random

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.errors import MarketNotFoundError
from src.pm_market.application.schemas import (
    LeaderboardEntry,
    LeaderboardResponse,
    MarketDetail,
    MarketListItem,
    MarketListResponse,
)
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository


class MarketApplicationService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._rng = rng or random.Random()

    async def _excluded_market_ids(self, db: AsyncSession, user_id: str) -> list[str]:
        """Markets to hide from a caller browsing with exclude_voted.

        Hide everything already voted on; once every active market has been
        voted on, hide only the most recently voted one so the feed never
        runs dry.
        """
        voted_ids = await self._repo.list_voted_market_ids(db, user_id)
        if not voted_ids:
            return []
        active_ids = await self._repo.list_active_market_ids(db)
        voted = set(voted_ids)
        if any(mid not in voted for mid in active_ids):
            return voted_ids
        if active_ids:
            return voted_ids[:1]
        return []

    async def list_markets(
        self,
        db: AsyncSession,
        user_id: str | None,
        exclude_voted: bool,
    ) -> MarketListResponse:
        exclude_ids: list[str] = []
        if exclude_voted and user_id:
            exclude_ids = await self._excluded_market_ids(db, user_id)

        markets = await self._repo.list_active_markets(db, exclude_ids)
        items = [MarketListItem.from_domain(m) for m in markets]
        # Browse order is deliberately unpredictable
        self._rng.shuffle(items)
        return MarketListResponse(items=items)

    async def get_market(self, db: AsyncSession, market_id: str) -> MarketDetail:
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return MarketDetail.from_domain(market)

    async def get_leaderboard(self, db: AsyncSession, limit: int) -> LeaderboardResponse:
        markets = await self._repo.list_top_markets(db, limit)
        entries = [
            LeaderboardEntry(
                rank=i,
                market_id=m.id,
                name=m.owner.name,
                email=m.owner.email,
                profile_picture=m.owner.profile_picture,
                current_line=m.current_line,
                total_votes=m.total_votes,
            )
            for i, m in enumerate(markets, start=1)
        ]
        return LeaderboardResponse(entries=entries)
