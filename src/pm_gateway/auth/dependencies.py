"""FastAPI dependencies for caller identity.

get_current_user    — protected routes; raises UnauthenticatedError.
get_optional_user_id — routes that also serve anonymous callers; returns None.
require_admin_user  — admin routes; caller email must be in ADMIN_EMAILS.

Usage:
    @router.get("/protected")
    async def protected(user: Annotated[UserModel, Depends(get_current_user)]):
        ...
"""

import uuid
from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.database import get_db_session
from src.pm_common.errors import AdminRequiredError, InvalidCredentialsError, UnauthenticatedError
from src.pm_gateway.auth.jwt_handler import decode_token
from src.pm_gateway.user.db_models import UserModel

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button).
# auto_error=False so a missing header surfaces as our own UnauthenticatedError.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def get_optional_user_id(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> str | None:
    """Return the user id from a valid access token, else None."""
    if not token:
        return None
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        return None
    try:
        return str(uuid.UUID(payload["sub"]))
    except ValueError:
        return None


async def get_current_user(
    user_id: Annotated[str | None, Depends(get_optional_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> UserModel:
    """Resolve the bearer token to a UserModel or raise UnauthenticatedError."""
    if user_id is None:
        raise UnauthenticatedError()

    result = await db.execute(select(UserModel).where(UserModel.id == uuid.UUID(user_id)))
    user = result.scalar_one_or_none()
    if user is None:
        raise UnauthenticatedError()
    return user


async def require_admin_user(
    current_user: Annotated[UserModel, Depends(get_current_user)],
) -> UserModel:
    admins = {email.lower() for email in settings.ADMIN_EMAILS}
    if current_user.email.lower() not in admins:
        raise AdminRequiredError()
    return current_user
