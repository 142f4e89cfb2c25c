# src/pm_admin/api/router.py
"""Admin REST API."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, EmailStr

from src.pm_admin.application.service import AdminService
from src.pm_common.response import ApiResponse, success_response
from src.pm_common.unit_of_work import UnitOfWork, get_unit_of_work
from src.pm_gateway.auth.dependencies import require_admin_user
from src.pm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


class CleanupRequest(BaseModel):
    keep_email: EmailStr


@router.post("/cleanup")
async def cleanup_users(
    request: Request,
    body: CleanupRequest,
    admin: Annotated[UserModel, Depends(require_admin_user)],
    uow: Annotated[UnitOfWork, Depends(get_unit_of_work)],
) -> ApiResponse:
    async with uow.begin() as db:
        result = await _service.cleanup_users(body.keep_email, db)
    resp = success_response(result)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
