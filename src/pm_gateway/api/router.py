"""Auth API router: register, verify email, login, refresh.

All JSON endpoints return ApiResponse. request_id is read from
request.state (injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.database import get_db_session
from src.pm_common.errors import InvalidVerificationTokenError
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    UserInfo,
    VerifyEmailRequest,
)
from src.pm_gateway.user.service import UserService
from src.pm_notify.email_client import EmailClient, get_email_client

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def _frontend_url(query: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/?{query}"


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="User registration",
)
async def register(
    request: Request,
    body: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    email_client: Annotated[EmailClient, Depends(get_email_client)],
) -> ApiResponse:
    async with db.begin():
        user = await _service.register(body.name, body.email, body.password, db)
    await _service.send_verification_email(user, email_client)

    data = RegisterResponse(
        user_id=str(user.id),
        name=user.name,
        email=user.email,
        created_at=user.created_at.isoformat(),
    )
    resp = success_response(
        data.model_dump(),
        message="Registration successful. Please check your email to verify your account.",
    )
    resp.request_id = _get_request_id(request)
    return resp


@router.get("/verify", summary="Verify email from the emailed link")
async def verify_email_link(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    token: str | None = Query(None),
) -> RedirectResponse:
    if not token:
        return RedirectResponse(_frontend_url("error=invalid-token"))
    try:
        async with db.begin():
            await _service.verify_email(token, db)
    except InvalidVerificationTokenError:
        # Token already used or unknown
        return RedirectResponse(_frontend_url("verified=already"))
    return RedirectResponse(_frontend_url("verified=true"))


@router.post("/verify", response_model=ApiResponse, summary="Verify email")
async def verify_email(
    request: Request,
    body: VerifyEmailRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    async with db.begin():
        user = await _service.verify_email(body.token, db)

    resp = success_response({"user_id": str(user.id)}, message="Email verified successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="User login",
)
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user, access_token, refresh_token = await _service.login(body.email, body.password, db)

    data = LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="Bearer",
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user=UserInfo(
            user_id=str(user.id),
            name=user.name,
            email=user.email,
            email_verified=user.email_verified,
        ),
    )
    resp = success_response(data.model_dump(), message="Login successful")
    resp.request_id = _get_request_id(request)
    return resp


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Refresh access token",
)
async def refresh_token(
    request: Request,
    body: RefreshRequest,
) -> ApiResponse:
    new_access_token = await _service.refresh(body.refresh_token)

    data = RefreshResponse(
        access_token=new_access_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    resp = success_response(data.model_dump(), message="Token refreshed")
    resp.request_id = _get_request_id(request)
    return resp
