"""Pydantic schemas for pm_market API responses."""

from pydantic import BaseModel

from src.pm_market.domain.models import Market, MarketOwner


class MarketOwnerOut(BaseModel):
    name: str
    profile_picture: str | None
    resume_url: str | None
    email: str

    @classmethod
    def from_domain(cls, o: MarketOwner) -> "MarketOwnerOut":
        return cls(
            name=o.name,
            profile_picture=o.profile_picture,
            resume_url=o.resume_url,
            email=o.email,
        )


class MarketListItem(BaseModel):
    """Card shown while browsing."""

    id: str
    title: str
    current_line: float
    over_votes: int
    under_votes: int
    profile: MarketOwnerOut

    @classmethod
    def from_domain(cls, m: Market) -> "MarketListItem":
        return cls(
            id=m.id,
            title=m.title,
            current_line=m.current_line,
            over_votes=m.over_votes,
            under_votes=m.under_votes,
            profile=MarketOwnerOut.from_domain(m.owner),
        )


class MarketListResponse(BaseModel):
    items: list[MarketListItem]


class MarketDetail(BaseModel):
    id: str
    profile_id: str
    title: str
    description: str | None
    status: str
    current_line: float
    initial_line: float
    over_votes: int
    under_votes: int
    total_votes: int
    profile: MarketOwnerOut
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, m: Market) -> "MarketDetail":
        return cls(
            id=m.id,
            profile_id=m.profile_id,
            title=m.title,
            description=m.description,
            status=m.status,
            current_line=m.current_line,
            initial_line=m.initial_line,
            over_votes=m.over_votes,
            under_votes=m.under_votes,
            total_votes=m.total_votes,
            profile=MarketOwnerOut.from_domain(m.owner),
            created_at=m.created_at.isoformat(),
            updated_at=m.updated_at.isoformat(),
        )


class LeaderboardEntry(BaseModel):
    rank: int
    market_id: str
    name: str
    email: str
    profile_picture: str | None
    current_line: float
    total_votes: int


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry]
