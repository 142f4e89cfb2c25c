"""pm_vote REST endpoints.

POST /votes    — cast an over/under vote on a market

The body is read and decoded inside the handler, after the identity check,
so an anonymous request with a bad body (including one that is not JSON at
all) is reported as unauthenticated rather than invalid.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.pm_common.errors import InvalidInputError, UnauthenticatedError
from src.pm_common.response import ApiResponse, success_response
from src.pm_common.unit_of_work import UnitOfWork, get_unit_of_work
from src.pm_gateway.auth.dependencies import get_optional_user_id
from src.pm_vote.application.service import VoteService

router = APIRouter(prefix="/votes", tags=["votes"])

_service = VoteService()


@router.post("")
async def cast_vote(
    request: Request,
    user_id: Annotated[str | None, Depends(get_optional_user_id)],
    uow: Annotated[UnitOfWork, Depends(get_unit_of_work)],
) -> ApiResponse:
    if not user_id:
        raise UnauthenticatedError()
    try:
        payload = await request.json()
    except ValueError as exc:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise InvalidInputError() from exc

    result = await _service.cast_vote(uow, user_id, payload)
    resp = success_response(result.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
