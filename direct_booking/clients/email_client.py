"""Resend API client for transactional emails."""

from typing import Any, Optional

import httpx
from structlog import get_logger

from direct_booking.config import settings

logger = get_logger(__name__)


class EmailClientError(Exception):
    """Raised when an email cannot be sent."""

    pass


class ResendEmailClient:
    """Sends plain-text emails through the Resend HTTP API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = settings.email.base_url.rstrip("/")
        self.api_key = api_key if api_key is not None else settings.email.api_key.get_secret_value()
        self.sender = f"{settings.email.from_name} <{settings.email.from_email}>"
        self.timeout = settings.email.request_timeout
        self._transport = transport

    async def send(
        self,
        to: list[str],
        subject: str,
        text: str,
        reply_to: Optional[str] = None,
    ) -> dict[str, Any]:
        """Send one email.

        Args:
            to: Recipient addresses
            subject: Subject line
            text: Plain-text body
            reply_to: Optional reply-to address

        Returns:
            Resend response (contains the message ``id``)

        Raises:
            EmailClientError: If the API key is missing or the request fails
        """
        if not self.api_key:
            raise EmailClientError("EMAIL_API_KEY is not set")

        payload: dict[str, Any] = {
            "from": self.sender,
            "to": to,
            "subject": subject,
            "text": text,
        }
        if reply_to:
            payload["reply_to"] = reply_to

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/emails",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.RequestError as e:
            raise EmailClientError(f"Email request failed: {str(e)}") from e

        if response.status_code >= 400:
            logger.error(
                "Email send failed",
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise EmailClientError(f"Email API error {response.status_code}")

        logger.debug("Email sent", subject=subject, recipients=len(to))
        return response.json() if response.text else {}
