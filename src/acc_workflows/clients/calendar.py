"""Google Calendar notification client."""

from __future__ import annotations

import logging
from datetime import timezone
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from acc_workflows.clients.google import GoogleApiClient
from acc_workflows.core.notifications import CreatedEvent

if TYPE_CHECKING:
    from datetime import datetime

    from acc_workflows.core.models import Credentials
    from acc_workflows.core.notifications import CalendarEventRequest
    from acc_workflows.settings import Settings

__all__ = ["EMAIL_REMINDER_MINUTES", "POPUP_REMINDER_MINUTES", "GoogleCalendarClient", "build_event_body"]

logger = logging.getLogger(__name__)

EMAIL_REMINDER_MINUTES = 24 * 60
POPUP_REMINDER_MINUTES = 10


def _utc_time(value: datetime) -> dict[str, str]:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return {"dateTime": value.astimezone(timezone.utc).isoformat(), "timeZone": "UTC"}


def build_event_body(event: CalendarEventRequest) -> dict[str, Any]:
    """Build the ``events.insert`` request body for ``event``."""
    return {
        "summary": event.summary,
        "description": event.description,
        "start": _utc_time(event.start_time),
        "end": _utc_time(event.end_time),
        "attendees": [{"email": email} for email in event.attendees],
        "reminders": {
            "useDefault": False,
            "overrides": [
                {"method": "email", "minutes": EMAIL_REMINDER_MINUTES},
                {"method": "popup", "minutes": POPUP_REMINDER_MINUTES},
            ],
        },
    }


class GoogleCalendarClient(GoogleApiClient):
    """Create events through the Google Calendar REST API."""

    provider = "google-calendar"

    @classmethod
    def _base_url_from(cls, settings: Settings) -> str:
        return settings.calendar_api_url

    async def create_event(self, event: CalendarEventRequest, credentials: Credentials) -> CreatedEvent:
        """Insert ``event`` into the connector account's calendar.

        Raises:
            NotificationClientError: If the token refresh or the insert request fails.
        """
        payload, refreshed = await self._request(
            "POST",
            f"calendars/{quote(event.calendar_id, safe='')}/events",
            credentials,
            json=build_event_body(event),
        )
        logger.debug("Google Calendar created event %s", payload.get("id"))
        return CreatedEvent(
            event_id=payload.get("id", ""),
            link=payload.get("htmlLink"),
            summary=payload.get("summary"),
            start=payload.get("start"),
            end=payload.get("end"),
            refreshed_credentials=refreshed,
        )
