"""Pydantic schemas for pm_profile.

profile_picture is a data URL or image URL produced by the frontend
uploader; empty strings are stored as NULL.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.pm_profile.domain.models import OwnMarket, Profile, ProfileDetail

_MAX_PICTURE_CHARS = 5_000_000


class ProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=120)
    profile_picture: str | None = Field(
        None, max_length=_MAX_PICTURE_CHARS, alias="profilePicture"
    )
    resume_url: str | None = Field(None, max_length=2048, alias="resumeUrl")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @field_validator("profile_picture", "resume_url")
    @classmethod
    def empty_to_none(cls, v: str | None) -> str | None:
        return v or None


class ProfileOut(BaseModel):
    id: str
    user_id: str
    name: str
    profile_picture: str | None
    resume_url: str | None
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, p: Profile) -> "ProfileOut":
        return cls(
            id=p.id,
            user_id=p.user_id,
            name=p.name,
            profile_picture=p.profile_picture,
            resume_url=p.resume_url,
            created_at=p.created_at.isoformat(),
            updated_at=p.updated_at.isoformat(),
        )


class OwnMarketOut(BaseModel):
    id: str
    title: str
    status: str
    current_line: float
    initial_line: float
    over_votes: int
    under_votes: int

    @classmethod
    def from_domain(cls, m: OwnMarket) -> "OwnMarketOut":
        return cls(
            id=m.id,
            title=m.title,
            status=m.status,
            current_line=m.current_line,
            initial_line=m.initial_line,
            over_votes=m.over_votes,
            under_votes=m.under_votes,
        )


class ProfileDetailOut(BaseModel):
    profile: ProfileOut
    email: str
    market: OwnMarketOut | None

    @classmethod
    def from_domain(cls, d: ProfileDetail) -> "ProfileDetailOut":
        return cls(
            profile=ProfileOut.from_domain(d.profile),
            email=d.email,
            market=OwnMarketOut.from_domain(d.market) if d.market else None,
        )


class CreateProfileResponse(BaseModel):
    profile_id: str
    market_id: str
