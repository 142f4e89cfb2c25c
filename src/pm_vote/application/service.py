"""VoteService — casts one vote against persisted market state.

Rejections, checked in this order (each a distinct AppError):
  1. no caller identity           -> UnauthenticatedError
  2. malformed body               -> InvalidInputError (see parse_vote_request)
  3. email not verified           -> EmailUnverifiedError
  4. caller already voted         -> DuplicateVoteError
  5. market missing / not active  -> MarketNotFoundError / MarketNotActiveError
  6. caller owns the market       -> SelfVoteForbiddenError

The vote insert and the market update run in a single unit of work with the
market row locked, so concurrent votes never lose an update. Transient
write conflicts re-run the whole unit of work (see retry_on_conflict).
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.enums import MarketStatus
from src.pm_common.errors import (
    DuplicateVoteError,
    EmailUnverifiedError,
    InvalidInputError,
    MarketNotActiveError,
    MarketNotFoundError,
    SelfVoteForbiddenError,
    UnauthenticatedError,
)
from src.pm_common.retry import retry_on_conflict
from src.pm_common.unit_of_work import UnitOfWork
from src.pm_vote.application.schemas import VoteRequest, VoteResponse
from src.pm_vote.domain.line import adjust_line
from src.pm_vote.domain.repository import VoteRepositoryProtocol
from src.pm_vote.infrastructure.persistence import VoteRepository

logger = logging.getLogger(__name__)


def parse_vote_request(payload: Any) -> VoteRequest:
    """Validate a raw body into a VoteRequest, or raise InvalidInputError."""
    try:
        return VoteRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidInputError() from exc


def is_self_vote(voter_id: str, owner_user_id: str) -> bool:
    """UUID comparison is case-insensitive."""
    return voter_id.lower() == owner_user_id.lower()


class VoteService:
    def __init__(
        self,
        repo: VoteRepositoryProtocol | None = None,
        max_attempts: int | None = None,
        retry_base_delay: float | None = None,
    ) -> None:
        self._repo: VoteRepositoryProtocol = repo or VoteRepository()
        self._max_attempts = (
            settings.VOTE_MAX_ATTEMPTS if max_attempts is None else max_attempts
        )
        if self._max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self._max_attempts}")
        self._retry_base_delay = (
            settings.VOTE_RETRY_BASE_DELAY if retry_base_delay is None else retry_base_delay
        )

    async def cast_vote(
        self,
        uow: UnitOfWork,
        user_id: str | None,
        req: VoteRequest | Mapping[str, Any] | None,
    ) -> VoteResponse:
        if not user_id:
            raise UnauthenticatedError()
        if not isinstance(req, VoteRequest):
            req = parse_vote_request(req)

        attempt = retry_on_conflict(
            max_attempts=self._max_attempts, base_delay=self._retry_base_delay
        )(self._cast_vote_once)
        return await attempt(uow, user_id, req)

    async def _cast_vote_once(
        self, uow: UnitOfWork, user_id: str, req: VoteRequest
    ) -> VoteResponse:
        async with uow.begin() as db:
            return await self._apply_vote(db, user_id, req)

    async def _apply_vote(
        self, db: AsyncSession, user_id: str, req: VoteRequest
    ) -> VoteResponse:
        market_id = req.market_id

        voter = await self._repo.get_voter(db, user_id)
        if voter is None:
            # Token outlived its user row; nothing to verify, so re-authenticate
            raise UnauthenticatedError()
        if not voter.email_verified:
            logger.info("vote rejected: user=%s email unverified", user_id)
            raise EmailUnverifiedError()

        if await self._repo.has_voted(db, user_id, market_id):
            logger.info("vote rejected: user=%s already voted on %s", user_id, market_id)
            raise DuplicateVoteError(market_id)

        market = await self._repo.lock_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        if market.status != MarketStatus.ACTIVE.value:
            raise MarketNotActiveError(market_id)
        if is_self_vote(user_id, market.owner_user_id):
            logger.info("vote rejected: user=%s owns market %s", user_id, market_id)
            raise SelfVoteForbiddenError()

        result = adjust_line(
            market.over_votes, market.under_votes, req.side, market.current_line
        )

        vote = await self._repo.insert_vote(
            db, user_id, market_id, req.side.value, market.current_line
        )
        if vote is None:
            # Lost the race against a concurrent request from the same user
            logger.info("vote rejected: user=%s concurrent duplicate on %s", user_id, market_id)
            raise DuplicateVoteError(market_id)

        await self._repo.update_market_line(
            db, market_id, result.over_votes, result.under_votes, result.new_line
        )

        logger.info(
            "vote accepted: market=%s side=%s line %.2f -> %.2f (over=%d under=%d)",
            market_id,
            req.side.value,
            market.current_line,
            result.new_line,
            result.over_votes,
            result.under_votes,
        )
        return VoteResponse(
            market_id=market_id,
            side=req.side,
            line_at_vote=market.current_line,
            new_line=result.new_line,
            over_votes=result.over_votes,
            under_votes=result.under_votes,
        )
