"""Transactional email delivery.

The client is built once at startup from settings (build_email_client) and
stored on app.state; request handlers receive it via get_email_client.

BrevoEmailClient posts to the Brevo v3 SMTP API over httpx. Without an API
key, LoggingEmailClient writes the message to the log instead, which is
how local development picks up verification links.
"""

import logging
from html import escape
from typing import Protocol

import httpx
from fastapi import Request

from config.settings import Settings

logger = logging.getLogger(__name__)


class EmailClient(Protocol):
    async def send(self, to_email: str, to_name: str, subject: str, html: str) -> None: ...

    async def close(self) -> None: ...


class BrevoEmailClient:
    def __init__(
        self,
        api_key: str,
        sender_name: str,
        sender_email: str,
        base_url: str = "https://api.brevo.com/v3",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._sender = {"name": sender_name, "email": sender_email}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"api-key": api_key, "accept": "application/json"},
            transport=transport,
        )

    async def send(self, to_email: str, to_name: str, subject: str, html: str) -> None:
        resp = await self._client.post(
            "/smtp/email",
            json={
                "sender": self._sender,
                "to": [{"email": to_email, "name": to_name}],
                "subject": subject,
                "htmlContent": html,
            },
        )
        resp.raise_for_status()
        logger.info("email sent to %s via Brevo (%s)", to_email, resp.json().get("messageId"))

    async def close(self) -> None:
        await self._client.aclose()


class LoggingEmailClient:
    async def send(self, to_email: str, to_name: str, subject: str, html: str) -> None:
        logger.info("email provider not configured; to=%s subject=%r\n%s", to_email, subject, html)

    async def close(self) -> None:
        return None


def build_email_client(cfg: Settings) -> EmailClient:
    if cfg.BREVO_API_KEY:
        return BrevoEmailClient(
            api_key=cfg.BREVO_API_KEY,
            sender_name=cfg.EMAIL_SENDER_NAME,
            sender_email=cfg.EMAIL_SENDER_ADDRESS,
            base_url=cfg.BREVO_API_URL,
        )
    return LoggingEmailClient()


def get_email_client(request: Request) -> EmailClient:
    """FastAPI dependency: the client created in the app lifespan."""
    client: EmailClient = request.app.state.email_client
    return client


def verification_email(name: str, verification_url: str, app_name: str) -> tuple[str, str]:
    """Return (subject, html) for the account verification message."""
    subject = f"Verify your {app_name} account"
    body = f"""
        <h1>Welcome to {app_name}!</h1>
        <p>Hi {escape(name)},</p>
        <p>Thanks for signing up! Please verify your email address by clicking the link below:</p>
        <a href="{verification_url}">Verify Email</a>
        <p>Or copy and paste this link into your browser:</p>
        <p>{verification_url}</p>
    """
    return subject, body
