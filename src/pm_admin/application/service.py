# src/pm_admin/application/service.py
"""Admin application service.

cleanup_users is the only code path that deletes markets. It removes every
user except one, together with their votes, profiles and markets. Votes
cast by remaining users on deleted markets go with the market
(votes.market_id ON DELETE CASCADE).
"""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.errors import UserNotFoundError

logger = logging.getLogger(__name__)

_GET_USER_ID_SQL = text("SELECT id FROM users WHERE email = :email")

_DELETE_VOTES_SQL = text("""
    DELETE FROM votes WHERE user_id <> :keep_user_id
""")
_DELETE_MARKETS_SQL = text("""
    DELETE FROM markets
    WHERE profile_id IN (SELECT id FROM profiles WHERE user_id <> :keep_user_id)
""")
_DELETE_PROFILES_SQL = text("""
    DELETE FROM profiles WHERE user_id <> :keep_user_id
""")
_DELETE_USERS_SQL = text("""
    DELETE FROM users WHERE id <> :keep_user_id
""")


class AdminService:
    async def cleanup_users(self, keep_email: str, db: AsyncSession) -> dict[str, Any]:
        """Delete all users except keep_email. Caller owns the transaction."""
        row = (
            await db.execute(_GET_USER_ID_SQL, {"email": keep_email.strip().lower()})
        ).fetchone()
        if row is None:
            raise UserNotFoundError(keep_email)
        params = {"keep_user_id": row.id}

        votes = (await db.execute(_DELETE_VOTES_SQL, params)).rowcount
        markets = (await db.execute(_DELETE_MARKETS_SQL, params)).rowcount
        profiles = (await db.execute(_DELETE_PROFILES_SQL, params)).rowcount
        users = (await db.execute(_DELETE_USERS_SQL, params)).rowcount

        logger.warning(
            "cleanup kept %s: deleted users=%d profiles=%d markets=%d votes=%d",
            keep_email,
            users,
            profiles,
            markets,
            votes,
        )
        return {
            "kept_email": keep_email,
            "deleted_users": users,
            "deleted_profiles": profiles,
            "deleted_markets": markets,
            "deleted_votes": votes,
        }
