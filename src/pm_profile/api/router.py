"""pm_profile REST endpoints.

POST /profile   — create the caller's profile and its market
GET  /profile   — the caller's profile, email and market
PUT  /profile   — update name / picture / resume
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from src.pm_common.response import ApiResponse, success_response
from src.pm_common.unit_of_work import UnitOfWork, get_unit_of_work
from src.pm_gateway.auth.dependencies import get_current_user
from src.pm_gateway.user.db_models import UserModel
from src.pm_profile.application.schemas import ProfileRequest
from src.pm_profile.application.service import ProfileApplicationService

router = APIRouter(prefix="/profile", tags=["profile"])

_service = ProfileApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_profile(
    request: Request,
    body: ProfileRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    uow: Annotated[UnitOfWork, Depends(get_unit_of_work)],
) -> ApiResponse:
    result = await _service.create_profile(uow, str(current_user.id), body)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def get_profile(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    uow: Annotated[UnitOfWork, Depends(get_unit_of_work)],
) -> ApiResponse:
    result = await _service.get_profile(uow, str(current_user.id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.put("")
async def update_profile(
    request: Request,
    body: ProfileRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    uow: Annotated[UnitOfWork, Depends(get_unit_of_work)],
) -> ApiResponse:
    result = await _service.update_profile(uow, str(current_user.id), body)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
