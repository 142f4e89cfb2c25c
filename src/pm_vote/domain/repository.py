# src/pm_vote/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock or an in-memory double that conforms to this
Protocol. Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_vote.domain.models import MarketVoteState, Vote, Voter


class VoteRepositoryProtocol(Protocol):
    async def get_voter(self, db: AsyncSession, user_id: str) -> Voter | None: ...

    async def has_voted(self, db: AsyncSession, user_id: str, market_id: str) -> bool: ...

    async def lock_market(
        self, db: AsyncSession, market_id: str
    ) -> MarketVoteState | None: ...

    async def insert_vote(
        self,
        db: AsyncSession,
        user_id: str,
        market_id: str,
        side: str,
        line_at_vote: float,
    ) -> Vote | None: ...

    async def update_market_line(
        self,
        db: AsyncSession,
        market_id: str,
        over_votes: int,
        under_votes: int,
        current_line: float,
    ) -> None: ...
