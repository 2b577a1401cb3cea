"""Request and response records exchanged with notification clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import datetime

    from acc_workflows.core.models import Credentials

__all__ = ["CalendarEventRequest", "CreatedEvent", "OutgoingEmail", "SentEmail"]


@dataclass(frozen=True)
class OutgoingEmail:
    """An email ready to be sent.

    Attributes:
        to: Comma-separated primary recipients.
        subject: Rendered subject line.
        body: Rendered plain-text body.
        cc: Comma-separated carbon-copy recipients.
        bcc: Comma-separated blind carbon-copy recipients.
        sender: ``From`` header, the authenticated account when omitted.
    """

    to: str | None
    subject: str
    body: str
    cc: str | None = None
    bcc: str | None = None
    sender: str | None = None


@dataclass(frozen=True)
class CalendarEventRequest:
    """A calendar event ready to be created.

    Attributes:
        summary: Rendered event title.
        description: Rendered event description.
        start_time: Event start.
        end_time: Event end.
        attendees: Attendee email addresses.
        calendar_id: Target calendar.
    """

    summary: str
    description: str
    start_time: datetime
    end_time: datetime
    attendees: list[str] = field(default_factory=list)
    calendar_id: str = "primary"


@dataclass
class SentEmail:
    """Provider response to a sent email.

    Attributes:
        message_id: Provider message identifier.
        thread_id: Provider thread identifier.
        label_ids: Labels applied by the provider.
        refreshed_credentials: Set when the client refreshed the access token.
    """

    message_id: str
    thread_id: str | None = None
    label_ids: list[str] = field(default_factory=list)
    refreshed_credentials: Credentials | None = field(default=None, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {"messageId": self.message_id, "threadId": self.thread_id, "labelIds": self.label_ids}


@dataclass
class CreatedEvent:
    """Provider response to a created calendar event.

    Attributes:
        event_id: Provider event identifier.
        link: Browser link to the event.
        summary: Event title as stored by the provider.
        start: Provider start record (``dateTime`` and ``timeZone``).
        end: Provider end record.
        refreshed_credentials: Set when the client refreshed the access token.
    """

    event_id: str
    link: str | None = None
    summary: str | None = None
    start: dict[str, Any] | None = None
    end: dict[str, Any] | None = None
    refreshed_credentials: Credentials | None = field(default=None, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "eventId": self.event_id,
            "htmlLink": self.link,
            "summary": self.summary,
            "start": self.start,
            "end": self.end,
        }
