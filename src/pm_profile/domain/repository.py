"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_profile.domain.models import Profile, ProfileDetail


class ProfileRepositoryProtocol(Protocol):
    async def get_detail_by_user_id(
        self, db: AsyncSession, user_id: str
    ) -> ProfileDetail | None: ...

    async def insert_profile(
        self,
        db: AsyncSession,
        user_id: str,
        name: str,
        profile_picture: str | None,
        resume_url: str | None,
    ) -> Profile | None: ...

    async def insert_market(
        self,
        db: AsyncSession,
        profile_id: str,
        title: str,
        description: str,
        initial_line: float,
    ) -> str: ...

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: str,
        name: str,
        profile_picture: str | None,
        resume_url: str | None,
    ) -> Profile | None: ...
