"""Gmail notification client."""

from __future__ import annotations

import base64
import logging
from email.message import EmailMessage
from typing import TYPE_CHECKING

from acc_workflows.clients.google import GoogleApiClient
from acc_workflows.core.notifications import SentEmail

if TYPE_CHECKING:
    from acc_workflows.core.models import Credentials
    from acc_workflows.core.notifications import OutgoingEmail
    from acc_workflows.settings import Settings

__all__ = ["GmailClient", "build_raw_message"]

logger = logging.getLogger(__name__)


def build_raw_message(message: OutgoingEmail) -> str:
    """Serialize ``message`` as a base64url-encoded RFC 5322 message.

    Empty ``cc``/``bcc`` headers are omitted; ``From`` defaults to ``me``,
    which Gmail replaces with the authenticated account.
    """
    email = EmailMessage()
    email["From"] = message.sender or "me"
    email["To"] = message.to or ""
    if message.cc:
        email["Cc"] = message.cc
    if message.bcc:
        email["Bcc"] = message.bcc
    email["Subject"] = message.subject
    email.set_content(message.body)
    return base64.urlsafe_b64encode(email.as_bytes()).decode("ascii")


class GmailClient(GoogleApiClient):
    """Send email through the Gmail REST API."""

    provider = "gmail"

    @classmethod
    def _base_url_from(cls, settings: Settings) -> str:
        return settings.gmail_api_url

    async def send_email(self, message: OutgoingEmail, credentials: Credentials) -> SentEmail:
        """Send ``message`` from the connector's account.

        Raises:
            NotificationClientError: If the token refresh or the send request fails.
        """
        payload, refreshed = await self._request(
            "POST",
            "users/me/messages/send",
            credentials,
            json={"raw": build_raw_message(message)},
        )
        logger.debug("Gmail accepted message %s", payload.get("id"))
        return SentEmail(
            message_id=payload.get("id", ""),
            thread_id=payload.get("threadId"),
            label_ids=list(payload.get("labelIds") or []),
            refreshed_credentials=refreshed,
        )
