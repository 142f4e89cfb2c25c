"""Domain models for pm_market — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class MarketOwner:
    """Public view of the profile behind a market."""

    name: str
    profile_picture: str | None
    resume_url: str | None
    email: str


@dataclass
class Market:
    id: str
    profile_id: str
    title: str
    description: str | None
    status: str
    current_line: float
    initial_line: float
    over_votes: int
    under_votes: int
    owner: MarketOwner
    created_at: datetime
    updated_at: datetime

    @property
    def total_votes(self) -> int:
        return self.over_votes + self.under_votes
