"""Unit tests for user service (mocked DB)."""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from sqlalchemy.exc import IntegrityError

from src.pm_common.errors import (
    EmailDomainNotAllowedError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidVerificationTokenError,
)
from src.pm_gateway.auth.jwt_handler import create_access_token, create_refresh_token
from src.pm_gateway.user.db_models import UserModel
from src.pm_gateway.user.service import UserService


def _make_user(email_verified: bool = False) -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.name = "Ada Lovelace"
    user.email = "ada@uwaterloo.ca"
    user.password_hash = "$2b$12$fakehash"
    user.email_verified = email_verified
    user.verification_token = None if email_verified else "a" * 64
    return user


def _scalar(value) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def service() -> UserService:
    return UserService(allowed_email_domain="uwaterloo.ca")


class TestRegister:
    async def test_creates_unverified_user_with_token(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(None))

        user = await service.register("Ada", " Ada@UWaterloo.ca ", "Pass1word", mock_db)

        assert user.email == "ada@uwaterloo.ca"
        assert user.email_verified is False
        assert len(user.verification_token) == 64
        assert user.password_hash != "Pass1word"
        mock_db.add.assert_called_once_with(user)
        mock_db.flush.assert_awaited_once()

    async def test_other_domain_rejected(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(EmailDomainNotAllowedError):
            await service.register("Ada", "ada@gmail.com", "Pass1word", mock_db)
        mock_db.execute.assert_not_called()

    async def test_lookalike_domain_rejected(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(EmailDomainNotAllowedError):
            await service.register("Ada", "ada@notuwaterloo.ca", "Pass1word", mock_db)

    async def test_empty_domain_allows_any(self, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(None))
        user = await UserService(allowed_email_domain="").register(
            "Ada", "ada@gmail.com", "Pass1word", mock_db
        )
        assert user.email == "ada@gmail.com"

    async def test_duplicate_email_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(_make_user()))

        with pytest.raises(EmailExistsError):
            await service.register("Ada", "ada@uwaterloo.ca", "Pass1word", mock_db)

    async def test_concurrent_duplicate_caught_at_flush(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(None))
        mock_db.flush = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception()))

        with pytest.raises(EmailExistsError):
            await service.register("Ada", "ada@uwaterloo.ca", "Pass1word", mock_db)


class TestSendVerificationEmail:
    async def test_sends_link_with_token(self, service: UserService) -> None:
        client = MagicMock()
        client.send = AsyncMock()
        user = _make_user()

        await service.send_verification_email(user, client)

        to_email, to_name, subject, html = client.send.call_args.args
        assert to_email == "ada@uwaterloo.ca"
        assert to_name == "Ada Lovelace"
        assert "Verify" in subject
        assert f"/api/v1/auth/verify?token={user.verification_token}" in html

    async def test_delivery_failure_is_logged_not_raised(self, service: UserService) -> None:
        client = MagicMock()
        client.send = AsyncMock(side_effect=httpx.ConnectError("down"))

        await service.send_verification_email(_make_user(), client)

        client.send.assert_awaited_once()


class TestVerifyEmail:
    async def test_marks_verified_and_clears_token(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = _make_user()
        mock_db.execute = AsyncMock(return_value=_scalar(user))

        verified = await service.verify_email("a" * 64, mock_db)

        assert verified.email_verified is True
        assert verified.verification_token is None
        mock_db.flush.assert_awaited_once()

    async def test_unknown_token(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(None))
        with pytest.raises(InvalidVerificationTokenError):
            await service.verify_email("b" * 64, mock_db)


class TestLogin:
    async def test_unknown_email_raises_credentials_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(None))

        with pytest.raises(InvalidCredentialsError):
            await service.login("nobody@uwaterloo.ca", "Pass1word", mock_db)

    async def test_wrong_password_raises_credentials_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(_make_user()))

        with (
            patch("src.pm_gateway.user.service.verify_password", return_value=False),
            pytest.raises(InvalidCredentialsError),
        ):
            await service.login("ada@uwaterloo.ca", "WrongPass1", mock_db)

    async def test_unverified_user_can_still_log_in(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = _make_user(email_verified=False)
        mock_db.execute = AsyncMock(return_value=_scalar(user))

        with patch("src.pm_gateway.user.service.verify_password", return_value=True):
            returned_user, access, refresh = await service.login(
                "ada@uwaterloo.ca", "Pass1word", mock_db
            )

        assert returned_user is user
        assert access != refresh


class TestRefresh:
    async def test_invalid_refresh_token_raises_error(self, service: UserService) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh("not.a.real.token")

    async def test_access_token_used_as_refresh_raises_error(self, service: UserService) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_access_token(str(uuid.uuid4())))

    async def test_issues_access_for_same_subject(self, service: UserService) -> None:
        from jose import jwt

        user_id = str(uuid.uuid4())
        access = await service.refresh(create_refresh_token(user_id))
        assert jwt.get_unverified_claims(access)["sub"] == user_id
