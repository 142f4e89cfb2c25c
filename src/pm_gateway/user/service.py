"""User domain service: register, verify email, login, refresh.

All DB operations use the injected AsyncSession. Transactions are managed
by the caller (router layer) via `async with db.begin()`.
"""

import logging
import secrets

import httpx
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.errors import (
    EmailDomainNotAllowedError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidVerificationTokenError,
)
from src.pm_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.pm_gateway.auth.password import hash_password, verify_password
from src.pm_gateway.user.db_models import UserModel
from src.pm_notify.email_client import EmailClient, verification_email

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    def __init__(self, allowed_email_domain: str | None = None) -> None:
        domain = (
            settings.ALLOWED_EMAIL_DOMAIN if allowed_email_domain is None else allowed_email_domain
        )
        self._allowed_domain = domain.lstrip("@").lower()

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> UserModel:
        """Create an unverified user holding a fresh verification token.

        The caller must wrap this in `async with db.begin()` and send the
        verification email after the commit.
        """
        email = _normalize_email(email)
        if self._allowed_domain and not email.endswith(f"@{self._allowed_domain}"):
            raise EmailDomainNotAllowedError(self._allowed_domain)

        # DB UNIQUE constraint is the final guard
        result = await db.execute(select(UserModel).where(UserModel.email == email))
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            name=name,
            email=email,
            password_hash=hash_password(password),
            email_verified=False,
            verification_token=secrets.token_hex(32),
        )
        db.add(user)
        try:
            await db.flush()  # Get user.id without committing
        except IntegrityError:
            # Concurrent registration with the same email won the race
            raise EmailExistsError() from None
        return user

    async def send_verification_email(self, user: UserModel, email_client: EmailClient) -> None:
        """Deliver the verification link. Delivery failure does not undo registration."""
        url = f"{settings.APP_BASE_URL.rstrip('/')}/api/v1/auth/verify?token={user.verification_token}"
        logger.debug("verification link for %s: %s", user.email, url)
        subject, html = verification_email(user.name, url, settings.APP_NAME)
        try:
            await email_client.send(user.email, user.name, subject, html)
        except httpx.HTTPError:
            logger.exception("verification email to %s failed", user.email)

    async def verify_email(self, token: str, db: AsyncSession) -> UserModel:
        """Mark the owner of an outstanding token as verified and clear the token."""
        result = await db.execute(
            select(UserModel).where(
                UserModel.verification_token == token,
                UserModel.email_verified.is_(False),
            )
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise InvalidVerificationTokenError()

        user.email_verified = True
        user.verification_token = None
        await db.flush()
        logger.info("email verified for user %s", user.id)
        return user

    async def login(
        self,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate and return (user, access_token, refresh_token).

        "User not found" and "wrong password" both raise InvalidCredentialsError
        so the response does not reveal which emails are registered.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.email == _normalize_email(email))
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        return (
            user,
            create_access_token(str(user.id)),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str) -> str:
        """Validate refresh token and return a new access token."""
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(str(payload["sub"]))
