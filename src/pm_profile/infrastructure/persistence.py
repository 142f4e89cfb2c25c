"""ProfileRepository — raw SQL persistence for profiles and their markets.

insert_profile() relies on the profiles.user_id UNIQUE constraint: a second
profile for the same user (including a concurrent one) inserts nothing and
returns None.

Transaction ownership: the caller opens the transaction; insert_profile and
insert_market must run inside the same one.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import MarketStatus
from src.pm_profile.domain.models import OwnMarket, Profile, ProfileDetail

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_PROFILE_COLUMNS = "id, user_id, name, profile_picture, resume_url, created_at, updated_at"

_INSERT_PROFILE_SQL = text(f"""
    INSERT INTO profiles (user_id, name, profile_picture, resume_url)
    VALUES (CAST(:user_id AS UUID), :name, :profile_picture, :resume_url)
    ON CONFLICT (user_id) DO NOTHING
    RETURNING {_PROFILE_COLUMNS}
""")

_INSERT_MARKET_SQL = text("""
    INSERT INTO markets (profile_id, title, description, status,
                         current_line, initial_line, over_votes, under_votes)
    VALUES (:profile_id, :title, :description, :status,
            :initial_line, :initial_line, 0, 0)
    RETURNING id
""")

_UPDATE_PROFILE_SQL = text(f"""
    UPDATE profiles
    SET name = :name,
        profile_picture = :profile_picture,
        resume_url = :resume_url
    WHERE user_id = CAST(:user_id AS UUID)
    RETURNING {_PROFILE_COLUMNS}
""")

_GET_PROFILE_DETAIL_SQL = text("""
    SELECT p.id, p.user_id, p.name, p.profile_picture, p.resume_url,
           p.created_at, p.updated_at,
           u.email,
           m.id AS market_id, m.title AS market_title, m.status AS market_status,
           m.current_line, m.initial_line, m.over_votes, m.under_votes
    FROM profiles p
    JOIN users u ON u.id = p.user_id
    LEFT JOIN markets m ON m.profile_id = p.id
    WHERE p.user_id = CAST(:user_id AS UUID)
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_profile(row: Any) -> Profile:
    return Profile(
        id=row.id,
        user_id=str(row.user_id),
        name=row.name,
        profile_picture=row.profile_picture,
        resume_url=row.resume_url,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_detail(row: Any) -> ProfileDetail:
    market = None
    if row.market_id is not None:
        market = OwnMarket(
            id=row.market_id,
            title=row.market_title,
            status=row.market_status,
            current_line=float(row.current_line),
            initial_line=float(row.initial_line),
            over_votes=row.over_votes,
            under_votes=row.under_votes,
        )
    return ProfileDetail(profile=_row_to_profile(row), email=row.email, market=market)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ProfileRepository:
    async def get_detail_by_user_id(
        self, db: AsyncSession, user_id: str
    ) -> ProfileDetail | None:
        result = await db.execute(_GET_PROFILE_DETAIL_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_detail(row) if row else None

    async def insert_profile(
        self,
        db: AsyncSession,
        user_id: str,
        name: str,
        profile_picture: str | None,
        resume_url: str | None,
    ) -> Profile | None:
        result = await db.execute(
            _INSERT_PROFILE_SQL,
            {
                "user_id": user_id,
                "name": name,
                "profile_picture": profile_picture,
                "resume_url": resume_url,
            },
        )
        row = result.fetchone()
        return _row_to_profile(row) if row else None

    async def insert_market(
        self,
        db: AsyncSession,
        profile_id: str,
        title: str,
        description: str,
        initial_line: float,
    ) -> str:
        result = await db.execute(
            _INSERT_MARKET_SQL,
            {
                "profile_id": profile_id,
                "title": title,
                "description": description,
                "status": MarketStatus.ACTIVE.value,
                "initial_line": initial_line,
            },
        )
        return str(result.scalar_one())

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: str,
        name: str,
        profile_picture: str | None,
        resume_url: str | None,
    ) -> Profile | None:
        result = await db.execute(
            _UPDATE_PROFILE_SQL,
            {
                "user_id": user_id,
                "name": name,
                "profile_picture": profile_picture,
                "resume_url": resume_url,
            },
        )
        row = result.fetchone()
        return _row_to_profile(row) if row else None
