"""ProfileApplicationService — profile lifecycle.

A profile and its market are created in one unit of work: either both
rows exist afterwards or neither does. Each user owns at most one profile.
"""

import logging

from config.settings import settings
from src.pm_common.errors import ProfileExistsError, ProfileNotFoundError
from src.pm_common.unit_of_work import UnitOfWork
from src.pm_profile.application.schemas import (
    CreateProfileResponse,
    ProfileDetailOut,
    ProfileOut,
    ProfileRequest,
)
from src.pm_profile.domain.models import market_description, market_title
from src.pm_profile.domain.repository import ProfileRepositoryProtocol
from src.pm_profile.infrastructure.persistence import ProfileRepository

logger = logging.getLogger(__name__)


class ProfileApplicationService:
    def __init__(
        self,
        repo: ProfileRepositoryProtocol | None = None,
        initial_line: float | None = None,
    ) -> None:
        self._repo: ProfileRepositoryProtocol = repo or ProfileRepository()
        self._initial_line = settings.INITIAL_LINE if initial_line is None else initial_line

    async def create_profile(
        self, uow: UnitOfWork, user_id: str, req: ProfileRequest
    ) -> CreateProfileResponse:
        async with uow.begin() as db:
            profile = await self._repo.insert_profile(
                db, user_id, req.name, req.profile_picture, req.resume_url
            )
            if profile is None:
                raise ProfileExistsError()
            market_id = await self._repo.insert_market(
                db,
                profile.id,
                market_title(req.name),
                market_description(req.name),
                self._initial_line,
            )

        logger.info(
            "profile %s created for user %s with market %s at line %.2f",
            profile.id,
            user_id,
            market_id,
            self._initial_line,
        )
        return CreateProfileResponse(profile_id=profile.id, market_id=market_id)

    async def get_profile(self, uow: UnitOfWork, user_id: str) -> ProfileDetailOut:
        async with uow.begin() as db:
            detail = await self._repo.get_detail_by_user_id(db, user_id)
        if detail is None:
            raise ProfileNotFoundError()
        return ProfileDetailOut.from_domain(detail)

    async def update_profile(
        self, uow: UnitOfWork, user_id: str, req: ProfileRequest
    ) -> ProfileOut:
        async with uow.begin() as db:
            profile = await self._repo.update_profile(
                db, user_id, req.name, req.profile_picture, req.resume_url
            )
            if profile is None:
                raise ProfileNotFoundError()
        return ProfileOut.from_domain(profile)
