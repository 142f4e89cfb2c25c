"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.pm_admin.api.router import router as admin_router
from src.pm_common.database import engine
from src.pm_common.errors import AppError, InternalError, InvalidInputError
from src.pm_common.response import rejection_response
from src.pm_gateway.api.router import router as auth_router
from src.pm_gateway.middleware.request_log import RequestLogMiddleware
from src.pm_market.api.router import router as market_router
from src.pm_notify.email_client import build_email_client
from src.pm_profile.api.router import router as profile_router
from src.pm_vote.api.router import router as vote_router

logger = logging.getLogger("pm.app")


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB, build the email client. Shutdown: dispose both."""
    configure_logging()
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    app.state.email_client = build_email_client(settings)
    logger.info("%s started (email client: %s)", settings.APP_NAME,
                type(app.state.email_client).__name__)
    yield
    await app.state.email_client.close()
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


def _error_json(request: Request, exc: AppError) -> JSONResponse:
    resp = rejection_response(exc, getattr(request.state, "request_id", None))
    return JSONResponse(status_code=exc.http_status, content=resp.model_dump())


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_json(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _error_json(request, InvalidInputError())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return _error_json(request, InternalError())


app.include_router(auth_router, prefix="/api/v1")
app.include_router(profile_router, prefix="/api/v1")
app.include_router(market_router, prefix="/api/v1")
app.include_router(vote_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
