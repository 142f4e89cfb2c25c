"""MarketRepository — concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM) and are read-only.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import Market, MarketOwner

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_SELECT_MARKET = """
    SELECT m.id, m.profile_id, m.title, m.description, m.status,
           m.current_line, m.initial_line, m.over_votes, m.under_votes,
           m.created_at, m.updated_at,
           p.name AS owner_name, p.profile_picture, p.resume_url,
           u.email AS owner_email
    FROM markets m
    JOIN profiles p ON p.id = m.profile_id
    JOIN users u ON u.id = p.user_id
"""

_GET_MARKET_SQL = text(f"""
    {_SELECT_MARKET}
    WHERE m.id = :market_id
""")

_LIST_ACTIVE_MARKETS_SQL = text(f"""
    {_SELECT_MARKET}
    WHERE m.status = 'active'
      AND NOT (m.id = ANY(CAST(:exclude_ids AS TEXT[])))
    ORDER BY m.created_at, m.id
""")

_LIST_ACTIVE_MARKET_IDS_SQL = text("""
    SELECT id FROM markets WHERE status = 'active'
""")

# Most recent vote first
_LIST_VOTED_MARKET_IDS_SQL = text("""
    SELECT market_id
    FROM votes
    WHERE user_id = CAST(:user_id AS UUID)
    ORDER BY created_at DESC, id DESC
""")

_LIST_TOP_MARKETS_SQL = text(f"""
    {_SELECT_MARKET}
    WHERE m.status = 'active'
    ORDER BY m.current_line DESC, (m.over_votes + m.under_votes) DESC, m.id
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: Any) -> Market:
    return Market(
        id=row.id,
        profile_id=row.profile_id,
        title=row.title,
        description=row.description,
        status=row.status,
        current_line=float(row.current_line),
        initial_line=float(row.initial_line),
        over_votes=row.over_votes,
        under_votes=row.under_votes,
        owner=MarketOwner(
            name=row.owner_name,
            profile_picture=row.profile_picture,
            resume_url=row.resume_url,
            email=row.owner_email,
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    """Concrete repository — all operations are read-only SQL queries."""

    async def get_market_by_id(
        self, db: AsyncSession, market_id: str
    ) -> Market | None:
        result = await db.execute(_GET_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def list_active_markets(
        self, db: AsyncSession, exclude_ids: list[str]
    ) -> list[Market]:
        result = await db.execute(
            _LIST_ACTIVE_MARKETS_SQL, {"exclude_ids": list(exclude_ids)}
        )
        return [_row_to_market(row) for row in result.fetchall()]

    async def list_active_market_ids(self, db: AsyncSession) -> list[str]:
        result = await db.execute(_LIST_ACTIVE_MARKET_IDS_SQL)
        return [row.id for row in result.fetchall()]

    async def list_voted_market_ids(
        self, db: AsyncSession, user_id: str
    ) -> list[str]:
        result = await db.execute(_LIST_VOTED_MARKET_IDS_SQL, {"user_id": user_id})
        return [row.market_id for row in result.fetchall()]

    async def list_top_markets(self, db: AsyncSession, limit: int) -> list[Market]:
        result = await db.execute(_LIST_TOP_MARKETS_SQL, {"limit": limit})
        return [_row_to_market(row) for row in result.fetchall()]
