# tests/unit/test_market_persistence.py
"""Unit tests for MarketRepository using MagicMock AsyncSession."""
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_market.infrastructure.persistence import MarketRepository


def _make_market_row(**kwargs):
    """Build a mock DB row with all required fields."""
    row = MagicMock()
    row.id = kwargs.get("id", "mkt-test")
    row.profile_id = kwargs.get("profile_id", "prof-test")
    row.title = kwargs.get("title", "Ada Lovelace - Next Co-op")
    row.description = kwargs.get("description")
    row.status = kwargs.get("status", "active")
    row.current_line = kwargs.get("current_line", Decimal("25.00"))
    row.initial_line = Decimal("25.00")
    row.over_votes = kwargs.get("over_votes", 0)
    row.under_votes = kwargs.get("under_votes", 0)
    row.owner_name = "Ada Lovelace"
    row.profile_picture = None
    row.resume_url = "https://example.com/ada.pdf"
    row.owner_email = "ada@uwaterloo.ca"
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


@pytest.fixture
def db():
    return MagicMock()


class TestGetMarketById:
    @pytest.mark.asyncio
    async def test_returns_market_when_found(self, db):
        row = _make_market_row(id="mkt-ada", current_line=Decimal("31.62"))
        result_mock = MagicMock()
        result_mock.fetchone.return_value = row
        db.execute = AsyncMock(return_value=result_mock)

        market = await MarketRepository().get_market_by_id(db, "mkt-ada")

        assert market is not None
        assert market.id == "mkt-ada"
        assert market.current_line == pytest.approx(31.62)
        assert isinstance(market.current_line, float)
        assert market.owner.email == "ada@uwaterloo.ca"

    @pytest.mark.asyncio
    async def test_returns_none_when_not_found(self, db):
        result_mock = MagicMock()
        result_mock.fetchone.return_value = None
        db.execute = AsyncMock(return_value=result_mock)

        market = await MarketRepository().get_market_by_id(db, "mkt-missing")

        assert market is None


class TestListActiveMarkets:
    @pytest.mark.asyncio
    async def test_returns_list_and_passes_exclusions(self, db):
        rows = [_make_market_row(id=f"mkt-{i}") for i in range(3)]
        result_mock = MagicMock()
        result_mock.fetchall.return_value = rows
        db.execute = AsyncMock(return_value=result_mock)

        markets = await MarketRepository().list_active_markets(db, ["mkt-9"])

        assert [m.id for m in markets] == ["mkt-0", "mkt-1", "mkt-2"]
        assert db.execute.call_args.args[1] == {"exclude_ids": ["mkt-9"]}


class TestIdLists:
    @pytest.mark.asyncio
    async def test_voted_ids_in_query_order(self, db):
        result_mock = MagicMock()
        result_mock.fetchall.return_value = [
            MagicMock(market_id="mkt-2"), MagicMock(market_id="mkt-1"),
        ]
        db.execute = AsyncMock(return_value=result_mock)

        ids = await MarketRepository().list_voted_market_ids(db, "u1")

        assert ids == ["mkt-2", "mkt-1"]
        assert "ORDER BY created_at DESC" in str(db.execute.call_args.args[0])

    @pytest.mark.asyncio
    async def test_active_ids(self, db):
        result_mock = MagicMock()
        result_mock.fetchall.return_value = [MagicMock(id="mkt-1")]
        db.execute = AsyncMock(return_value=result_mock)

        assert await MarketRepository().list_active_market_ids(db) == ["mkt-1"]


class TestListTopMarkets:
    @pytest.mark.asyncio
    async def test_orders_by_line_and_limits(self, db):
        result_mock = MagicMock()
        result_mock.fetchall.return_value = [_make_market_row()]
        db.execute = AsyncMock(return_value=result_mock)

        markets = await MarketRepository().list_top_markets(db, 25)

        assert len(markets) == 1
        sql = str(db.execute.call_args.args[0])
        assert "ORDER BY m.current_line DESC" in sql
        assert db.execute.call_args.args[1] == {"limit": 25}
