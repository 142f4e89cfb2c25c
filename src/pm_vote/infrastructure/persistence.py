"""VoteRepository — concrete implementation of VoteRepositoryProtocol.

All queries use raw text() SQL (no ORM).

Transaction ownership: the CALLER (VoteService via UnitOfWork) opens and
commits the transaction. lock_market() takes a row lock (SELECT ... FOR
UPDATE) that is held until that transaction ends, so concurrent votes on
one market are applied one after another against fresh counters.

Uniqueness of (user_id, market_id) is enforced by uq_votes_user_market;
insert_vote() returns None when that constraint rejects the row.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_vote.domain.models import MarketVoteState, Vote, Voter

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_VOTER_SQL = text("""
    SELECT id, email_verified
    FROM users
    WHERE id = CAST(:user_id AS UUID)
""")

_HAS_VOTED_SQL = text("""
    SELECT 1
    FROM votes
    WHERE user_id = CAST(:user_id AS UUID) AND market_id = :market_id
""")

_LOCK_MARKET_SQL = text("""
    SELECT m.id, m.status, m.current_line, m.over_votes, m.under_votes,
           p.user_id AS owner_user_id
    FROM markets m
    JOIN profiles p ON p.id = m.profile_id
    WHERE m.id = :market_id
    FOR UPDATE OF m
""")

_INSERT_VOTE_SQL = text("""
    INSERT INTO votes (user_id, market_id, side, line_at_vote)
    VALUES (CAST(:user_id AS UUID), :market_id, :side, :line_at_vote)
    ON CONFLICT ON CONSTRAINT uq_votes_user_market DO NOTHING
    RETURNING id, user_id, market_id, side, line_at_vote, created_at
""")

_UPDATE_MARKET_LINE_SQL = text("""
    UPDATE markets
    SET over_votes   = :over_votes,
        under_votes  = :under_votes,
        current_line = :current_line
    WHERE id = :market_id
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market_state(row: Any) -> MarketVoteState:
    return MarketVoteState(
        id=row.id,
        status=row.status,
        owner_user_id=str(row.owner_user_id),
        current_line=float(row.current_line),
        over_votes=row.over_votes,
        under_votes=row.under_votes,
    )


def _row_to_vote(row: Any) -> Vote:
    return Vote(
        id=row.id,
        user_id=str(row.user_id),
        market_id=row.market_id,
        side=row.side,
        line_at_vote=float(row.line_at_vote),
        created_at=row.created_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class VoteRepository:
    async def get_voter(self, db: AsyncSession, user_id: str) -> Voter | None:
        result = await db.execute(_GET_VOTER_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            return None
        return Voter(id=str(row.id), email_verified=bool(row.email_verified))

    async def has_voted(self, db: AsyncSession, user_id: str, market_id: str) -> bool:
        result = await db.execute(
            _HAS_VOTED_SQL, {"user_id": user_id, "market_id": market_id}
        )
        return result.fetchone() is not None

    async def lock_market(
        self, db: AsyncSession, market_id: str
    ) -> MarketVoteState | None:
        result = await db.execute(_LOCK_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market_state(row) if row else None

    async def insert_vote(
        self,
        db: AsyncSession,
        user_id: str,
        market_id: str,
        side: str,
        line_at_vote: float,
    ) -> Vote | None:
        result = await db.execute(
            _INSERT_VOTE_SQL,
            {
                "user_id": user_id,
                "market_id": market_id,
                "side": side,
                "line_at_vote": line_at_vote,
            },
        )
        row = result.fetchone()
        return _row_to_vote(row) if row else None

    async def update_market_line(
        self,
        db: AsyncSession,
        market_id: str,
        over_votes: int,
        under_votes: int,
        current_line: float,
    ) -> None:
        await db.execute(
            _UPDATE_MARKET_LINE_SQL,
            {
                "market_id": market_id,
                "over_votes": over_votes,
                "under_votes": under_votes,
                "current_line": current_line,
            },
        )
