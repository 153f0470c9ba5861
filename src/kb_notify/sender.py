"""Outbound balance notifications over SMS (Twilio) or email (Mailjet).

Senders never raise: transport and provider errors come back as a
NotificationResult with success=False so the ledger operation that asked
for the notification is unaffected.
"""

import html
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from config.settings import settings
from src.kb_common.enums import NotificationChannel

logger = logging.getLogger(__name__)

_TWILIO_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"
_MAILJET_URL = "https://api.mailjet.com/v3.1/send"


@dataclass
class NotificationResult:
    success: bool
    message_id: str | None = None
    error: str | None = None


def _json_field(
    response: httpx.Response, pick: Callable[[Any], str | None]
) -> str | None:
    """Provider message id from a 2xx body, or None when the body is unreadable.

    The provider accepted the message either way, so a malformed body is not
    a send failure.
    """
    try:
        return pick(response.json())
    except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
        logger.warning("Unreadable provider response (%s): %s", response.status_code, exc)
        return None


class NotificationSender(Protocol):
    channel: NotificationChannel

    async def send_balance_notification(
        self, contact: str, message: str
    ) -> NotificationResult: ...


class SmsSender:
    """Twilio Messages API. Unconfigured: logs the message and reports success."""

    channel = NotificationChannel.SMS

    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.account_sid = account_sid or settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or settings.TWILIO_AUTH_TOKEN
        self.from_number = from_number or settings.TWILIO_PHONE_NUMBER
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT_SECONDS
        self._transport = transport

    async def send_balance_notification(
        self, contact: str, message: str
    ) -> NotificationResult:
        if not self.account_sid or not self.auth_token:
            logger.info("SMS not configured; would send to %s: %s", contact, message)
            return NotificationResult(success=True, error="SMS service not configured")

        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout
            ) as client:
                response = await client.post(
                    _TWILIO_URL.format(sid=self.account_sid),
                    data={"To": contact, "From": self.from_number or "", "Body": message},
                    auth=(self.account_sid, self.auth_token),
                )
                response.raise_for_status()
        except (httpx.HTTPStatusError, httpx.RequestError) as exc:
            logger.warning("SMS to %s failed: %s", contact, exc)
            return NotificationResult(success=False, error=str(exc))

        message_id = _json_field(response, lambda data: data.get("sid"))
        logger.info("SMS sent to %s sid=%s", contact, message_id)
        return NotificationResult(success=True, message_id=message_id)


class EmailSender:
    """Mailjet v3.1 send API. Unconfigured: reports failure."""

    channel = NotificationChannel.EMAIL

    def __init__(
        self,
        api_key: str | None = None,
        secret_key: str | None = None,
        from_email: str | None = None,
        from_name: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.MAILJET_API_KEY
        self.secret_key = secret_key or settings.MAILJET_SECRET_KEY
        self.from_email = from_email or settings.MAILJET_FROM_EMAIL
        self.from_name = from_name or settings.MAILJET_FROM_NAME
        self.timeout = timeout or settings.NOTIFICATION_TIMEOUT_SECONDS
        self._transport = transport

    async def send_balance_notification(
        self, contact: str, message: str
    ) -> NotificationResult:
        if not self.api_key or not self.secret_key:
            logger.error("Mailjet credentials missing; email to %s not sent", contact)
            return NotificationResult(success=False, error="Email service not configured")

        payload = {
            "Messages": [
                {
                    "From": {"Email": self.from_email, "Name": self.from_name},
                    "To": [{"Email": contact}],
                    "Subject": "Payment Reminder",
                    "TextPart": message,
                    "HTMLPart": f"<p>{html.escape(message)}</p>",
                }
            ]
        }
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout
            ) as client:
                response = await client.post(
                    _MAILJET_URL, json=payload, auth=(self.api_key, self.secret_key)
                )
                response.raise_for_status()
        except (httpx.HTTPStatusError, httpx.RequestError) as exc:
            logger.warning("Email to %s failed: %s", contact, exc)
            return NotificationResult(success=False, error=str(exc))

        message_id = _json_field(
            response, lambda data: str(data["Messages"][0]["To"][0]["MessageID"])
        )
        logger.info("Email sent to %s id=%s", contact, message_id)
        return NotificationResult(success=True, message_id=message_id)


def get_notification_sender() -> NotificationSender:
    """Sender for the configured NOTIFICATION_CHANNEL (defaults to SMS)."""
    if settings.NOTIFICATION_CHANNEL == NotificationChannel.EMAIL:
        return EmailSender()
    return SmsSender()
