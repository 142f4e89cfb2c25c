"""Unit-test doubles for the vote ledger.

InMemoryLedger implements VoteRepositoryProtocol with the storage semantics
the service relies on:
  - lock_market() holds a per-market lock until the transaction ends and
    returns the latest committed row;
  - (user_id, market_id) is unique: insert_vote() returns None on conflict;
  - writes become visible only when the unit of work commits.
Each repository call yields to the event loop so concurrent tasks interleave.
"""

import asyncio
import dataclasses
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from src.pm_vote.domain.models import MarketVoteState, Vote, Voter


class _Tx:
    def __init__(self) -> None:
        self.locks: list[asyncio.Lock] = []
        self.votes: dict[tuple[str, str], Vote] = {}
        self.markets: dict[str, MarketVoteState] = {}


class InMemoryLedger:
    def __init__(self) -> None:
        self.users: dict[str, Voter] = {}
        self.markets: dict[str, MarketVoteState] = {}
        self.votes: dict[tuple[str, str], Vote] = {}
        self.commits = 0
        self.rollbacks = 0
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._seq = 0

    # -- fixtures -----------------------------------------------------------

    def add_user(self, user_id: str, email_verified: bool = True) -> None:
        self.users[user_id] = Voter(id=user_id, email_verified=email_verified)

    def add_market(
        self,
        market_id: str,
        owner_user_id: str,
        current_line: float = 25.0,
        over_votes: int = 0,
        under_votes: int = 0,
        status: str = "active",
    ) -> None:
        self.markets[market_id] = MarketVoteState(
            id=market_id,
            status=status,
            owner_user_id=owner_user_id,
            current_line=current_line,
            over_votes=over_votes,
            under_votes=under_votes,
        )

    # -- unit of work -------------------------------------------------------

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[_Tx]:
        tx = _Tx()
        try:
            yield tx
        except BaseException:
            self.rollbacks += 1
            raise
        else:
            self.votes.update(tx.votes)
            self.markets.update(tx.markets)
            self.commits += 1
        finally:
            for lock in tx.locks:
                lock.release()

    # -- VoteRepositoryProtocol --------------------------------------------

    async def get_voter(self, db: _Tx, user_id: str) -> Voter | None:
        await asyncio.sleep(0)
        return self.users.get(user_id)

    async def has_voted(self, db: _Tx, user_id: str, market_id: str) -> bool:
        await asyncio.sleep(0)
        return (user_id, market_id) in self.votes

    async def lock_market(self, db: _Tx, market_id: str) -> MarketVoteState | None:
        if market_id not in self.markets:
            return None
        lock = self._locks[market_id]
        await lock.acquire()
        db.locks.append(lock)
        await asyncio.sleep(0)
        return dataclasses.replace(self.markets[market_id])

    async def insert_vote(
        self, db: _Tx, user_id: str, market_id: str, side: str, line_at_vote: float
    ) -> Vote | None:
        await asyncio.sleep(0)
        key = (user_id, market_id)
        if key in self.votes or key in db.votes:
            return None
        self._seq += 1
        vote = Vote(
            id=f"vote-{self._seq}",
            user_id=user_id,
            market_id=market_id,
            side=side,
            line_at_vote=line_at_vote,
            created_at=datetime.now(UTC),
        )
        db.votes[key] = vote
        return vote

    async def update_market_line(
        self,
        db: _Tx,
        market_id: str,
        over_votes: int,
        under_votes: int,
        current_line: float,
    ) -> None:
        await asyncio.sleep(0)
        db.markets[market_id] = dataclasses.replace(
            self.markets[market_id],
            over_votes=over_votes,
            under_votes=under_votes,
            current_line=current_line,
        )


class RecordingUnitOfWork:
    """UnitOfWork double around a MagicMock session; counts commits/rollbacks."""

    def __init__(self) -> None:
        self.session = MagicMock()
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[MagicMock]:
        try:
            yield self.session
        except BaseException:
            self.rollbacks += 1
            raise
        else:
            self.commits += 1


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def recording_uow() -> RecordingUnitOfWork:
    return RecordingUnitOfWork()
