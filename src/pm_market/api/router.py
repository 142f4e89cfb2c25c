"""pm_market REST endpoints.

GET /markets                   — active markets, shuffled
GET /markets/leaderboard       — active markets ranked by current line
GET /markets/{market_id}       — full detail

Browsing is public; exclude_voted only applies to an authenticated caller.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_optional_user_id
from src.pm_market.application.service import MarketApplicationService

router = APIRouter(prefix="/markets", tags=["markets"])

_service = MarketApplicationService()


@router.get("")
async def list_markets(
    request: Request,
    user_id: Annotated[str | None, Depends(get_optional_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    exclude_voted: bool = Query(
        False, description="Hide markets the caller already voted on."
    ),
) -> ApiResponse:
    result = await _service.list_markets(db, user_id, exclude_voted)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/leaderboard")
async def get_leaderboard(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    limit: int = Query(25, ge=1, le=100),
) -> ApiResponse:
    result = await _service.get_leaderboard(db, limit)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_market(db, market_id)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
