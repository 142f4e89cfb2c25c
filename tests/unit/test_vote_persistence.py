# tests/unit/test_vote_persistence.py
"""Unit tests for VoteRepository using MagicMock AsyncSession."""
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_vote.infrastructure.persistence import VoteRepository

USER_ID = uuid.UUID("0b5e1c1e-7d0e-4f4a-9a7e-6a0f3c2b9d11")


def _result(row=None):
    result_mock = MagicMock()
    result_mock.fetchone.return_value = row
    return result_mock


@pytest.fixture
def db():
    return MagicMock()


class TestGetVoter:
    @pytest.mark.asyncio
    async def test_maps_uuid_to_str(self, db):
        row = MagicMock(id=USER_ID, email_verified=True)
        db.execute = AsyncMock(return_value=_result(row))

        voter = await VoteRepository().get_voter(db, str(USER_ID))

        assert voter is not None
        assert voter.id == str(USER_ID)
        assert voter.email_verified is True

    @pytest.mark.asyncio
    async def test_missing_user(self, db):
        db.execute = AsyncMock(return_value=_result(None))
        assert await VoteRepository().get_voter(db, str(USER_ID)) is None


class TestHasVoted:
    @pytest.mark.asyncio
    async def test_true_when_row_exists(self, db):
        db.execute = AsyncMock(return_value=_result(MagicMock()))
        assert await VoteRepository().has_voted(db, str(USER_ID), "mkt-1") is True

    @pytest.mark.asyncio
    async def test_false_when_no_row(self, db):
        db.execute = AsyncMock(return_value=_result(None))
        assert await VoteRepository().has_voted(db, str(USER_ID), "mkt-1") is False


class TestLockMarket:
    @pytest.mark.asyncio
    async def test_uses_row_lock(self, db):
        row = MagicMock(
            id="mkt-1", status="active", current_line=Decimal("25.00"),
            over_votes=0, under_votes=0, owner_user_id=USER_ID,
        )
        db.execute = AsyncMock(return_value=_result(row))

        state = await VoteRepository().lock_market(db, "mkt-1")

        sql = str(db.execute.call_args.args[0])
        assert "FOR UPDATE" in sql
        assert state is not None
        assert state.current_line == 25.0
        assert isinstance(state.current_line, float)
        assert state.owner_user_id == str(USER_ID)

    @pytest.mark.asyncio
    async def test_missing_market(self, db):
        db.execute = AsyncMock(return_value=_result(None))
        assert await VoteRepository().lock_market(db, "nope") is None


class TestInsertVote:
    @pytest.mark.asyncio
    async def test_returns_vote_when_inserted(self, db):
        row = MagicMock(
            id="v-1", user_id=USER_ID, market_id="mkt-1", side="over",
            line_at_vote=Decimal("25.00"), created_at=datetime.now(UTC),
        )
        db.execute = AsyncMock(return_value=_result(row))

        vote = await VoteRepository().insert_vote(db, str(USER_ID), "mkt-1", "over", 25.0)

        assert vote is not None
        assert vote.side == "over"
        assert vote.line_at_vote == 25.0
        params = db.execute.call_args.args[1]
        assert params == {
            "user_id": str(USER_ID), "market_id": "mkt-1",
            "side": "over", "line_at_vote": 25.0,
        }

    @pytest.mark.asyncio
    async def test_returns_none_on_unique_conflict(self, db):
        db.execute = AsyncMock(return_value=_result(None))

        vote = await VoteRepository().insert_vote(db, str(USER_ID), "mkt-1", "over", 25.0)

        sql = str(db.execute.call_args.args[0])
        assert "ON CONFLICT" in sql
        assert vote is None


class TestUpdateMarketLine:
    @pytest.mark.asyncio
    async def test_passes_tallies_and_line(self, db):
        db.execute = AsyncMock()

        await VoteRepository().update_market_line(db, "mkt-1", 3, 2, 27.5)

        params = db.execute.call_args.args[1]
        assert params == {
            "market_id": "mkt-1", "over_votes": 3, "under_votes": 2, "current_line": 27.5,
        }
