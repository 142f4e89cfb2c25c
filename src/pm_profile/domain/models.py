"""Domain models for pm_profile — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Profile:
    id: str
    user_id: str
    name: str
    profile_picture: str | None
    resume_url: str | None
    created_at: datetime
    updated_at: datetime


@dataclass
class OwnMarket:
    """The market tied 1:1 to a profile, as shown to its owner."""

    id: str
    title: str
    status: str
    current_line: float
    initial_line: float
    over_votes: int
    under_votes: int


@dataclass
class ProfileDetail:
    profile: Profile
    email: str
    market: OwnMarket | None


def market_title(name: str) -> str:
    return f"{name} - Next Co-op"


def market_description(name: str) -> str:
    return f"Over/under on {name}'s next co-op salary"
