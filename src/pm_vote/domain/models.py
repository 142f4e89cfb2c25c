"""Domain models for pm_vote — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Voter:
    """The calling user as seen by the vote ledger."""

    id: str
    email_verified: bool


@dataclass
class MarketVoteState:
    """Market row read under lock inside the vote transaction."""

    id: str
    status: str
    owner_user_id: str
    current_line: float
    over_votes: int
    under_votes: int


@dataclass
class Vote:
    id: str
    user_id: str
    market_id: str
    side: str
    line_at_vote: float
    created_at: datetime
