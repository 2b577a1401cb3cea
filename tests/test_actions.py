"""Tests for action dispatch and start time computation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, ClassVar

import httpx
import pytest

from acc_workflows.clients.gmail import GmailClient
from acc_workflows.clients.google import GoogleTokenRefresher
from acc_workflows.core.definition import CalendarActionNode, EmailActionNode, Node
from acc_workflows.core.types import Capability
from acc_workflows.engine.actions import ActionDispatcher, compute_start_time
from acc_workflows.exceptions import UnsupportedActionKindError
from tests.conftest import (
    FIXED_NOW,
    InMemoryConnectorResolver,
    RecordingCalendarClient,
    RecordingEmailClient,
    make_credentials,
)

if TYPE_CHECKING:
    from acc_workflows.core.events import TriggerEvent
    from acc_workflows.core.models import Credentials
    from acc_workflows.exceptions import NotificationClientError


@pytest.mark.unit
class TestComputeStartTime:
    """Tests for compute_start_time."""

    now = datetime(2026, 3, 10, 14, 30, 15, tzinfo=timezone.utc)

    def test_fifteen_minutes(self) -> None:
        assert compute_start_time("15min", self.now) == self.now + timedelta(minutes=15)

    def test_one_hour(self) -> None:
        assert compute_start_time("1hour", self.now) == self.now + timedelta(hours=1)

    def test_next_day_at_nine(self) -> None:
        assert compute_start_time("next-day", self.now) == datetime(2026, 3, 11, 9, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("symbol", [None, "", "now", "tomorrow"])
    def test_anything_else_is_now(self, symbol: str | None) -> None:
        assert compute_start_time(symbol, self.now) == self.now


@pytest.mark.unit
class TestEmailAction:
    """Tests for email action dispatch."""

    async def test_sends_rendered_email(
        self,
        dispatcher: ActionDispatcher,
        email_client: RecordingEmailClient,
        email_credentials: Credentials,
        upload_event: TriggerEvent,
    ) -> None:
        node = EmailActionNode(
            id="e",
            config={
                "to": "pm@example.com",
                "cc": "lead@example.com",
                "subject": "New: {{filename}}",
                "body": "{{uploader}} uploaded to {{project}}",
            },
        )

        result = await dispatcher.execute_action(node, upload_event, "user-1")

        assert result.success
        assert result.message == "Email sent successfully"
        assert result.data == {"messageId": "msg-1", "threadId": "thread-1", "labelIds": ["SENT"]}
        message, credentials = email_client.sent[0]
        assert credentials is email_credentials
        assert message.to == "pm@example.com"
        assert message.cc == "lead@example.com"
        assert message.bcc is None
        assert message.subject == "New: report.pdf"
        assert message.body == "Ada uploaded to Tower A"

    async def test_default_subject_and_body(
        self,
        dispatcher: ActionDispatcher,
        email_client: RecordingEmailClient,
        upload_event: TriggerEvent,
    ) -> None:
        await dispatcher.execute_action(EmailActionNode(id="e", config={"to": "a@example.com"}), upload_event, "user-1")

        message, _ = email_client.sent[0]
        assert message.subject == "File uploaded: report.pdf"
        assert message.body == "A new file has been uploaded"

    async def test_missing_connector(
        self,
        email_client: RecordingEmailClient,
        calendar_client: RecordingCalendarClient,
        upload_event: TriggerEvent,
    ) -> None:
        dispatcher = ActionDispatcher(InMemoryConnectorResolver(), email_client, calendar_client)

        result = await dispatcher.execute_action(EmailActionNode(id="e"), upload_event, "user-1")

        assert not result.success
        assert result.message == "No active email connector found"
        assert email_client.sent == []

    async def test_provider_failure(
        self,
        connectors: InMemoryConnectorResolver,
        calendar_client: RecordingCalendarClient,
        upload_event: TriggerEvent,
        provider_failure: NotificationClientError,
    ) -> None:
        email_client = RecordingEmailClient(failures=[provider_failure])
        dispatcher = ActionDispatcher(connectors, email_client, calendar_client)

        result = await dispatcher.execute_action(EmailActionNode(id="e"), upload_event, "user-1")

        assert not result.success
        assert result.message == "Quota exceeded"

    async def test_unreadable_provider_response(
        self,
        connectors: InMemoryConnectorResolver,
        calendar_client: RecordingCalendarClient,
        upload_event: TriggerEvent,
    ) -> None:
        """A 2xx Gmail answer that is not JSON becomes a failed result."""

        def html(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>ok</html>")

        async with httpx.AsyncClient(transport=httpx.MockTransport(html)) as http:
            refresher = GoogleTokenRefresher(http, client_id="client-id", client_secret="client-secret")
            email_client = GmailClient(refresher, "https://gmail.example.com/gmail/v1")
            dispatcher = ActionDispatcher(connectors, email_client, calendar_client)

            result = await dispatcher.execute_action(EmailActionNode(id="e"), upload_event, "user-1")

        assert not result.success
        assert result.message == "gmail returned an unreadable response"

    async def test_reports_refreshed_credentials(
        self,
        connectors: InMemoryConnectorResolver,
        calendar_client: RecordingCalendarClient,
        upload_event: TriggerEvent,
    ) -> None:
        refreshed = make_credentials("gmail", access_token="new-token")
        dispatcher = ActionDispatcher(connectors, RecordingEmailClient(refreshed=refreshed), calendar_client)

        result = await dispatcher.execute_action(EmailActionNode(id="e"), upload_event, "user-1")

        assert result.refreshed_credentials is refreshed


@pytest.mark.unit
class TestCalendarAction:
    """Tests for calendar action dispatch."""

    async def test_creates_rendered_event(
        self,
        dispatcher: ActionDispatcher,
        calendar_client: RecordingCalendarClient,
        calendar_credentials: Credentials,
        upload_event: TriggerEvent,
    ) -> None:
        node = CalendarActionNode(
            id="c",
            config={
                "title": "Review {{filename}}",
                "description": "Uploaded by {{uploader}}",
                "startTime": "1hour",
                "duration": "30",
                "attendees": "a@example.com, b@example.com",
            },
        )

        result = await dispatcher.execute_action(node, upload_event, "user-1")

        assert result.success
        assert result.message == "Calendar event created successfully"
        assert result.data is not None
        assert result.data["eventId"] == "evt-1"
        assert result.data["htmlLink"] == "https://calendar.google.com/event?eid=1"
        request, credentials = calendar_client.created[0]
        assert credentials is calendar_credentials
        assert request.summary == "Review report.pdf"
        assert request.description == "Uploaded by Ada"
        assert request.start_time == FIXED_NOW + timedelta(hours=1)
        assert request.end_time == FIXED_NOW + timedelta(hours=1, minutes=30)
        assert request.attendees == ["a@example.com", "b@example.com"]

    async def test_defaults(
        self,
        dispatcher: ActionDispatcher,
        calendar_client: RecordingCalendarClient,
        upload_event: TriggerEvent,
    ) -> None:
        await dispatcher.execute_action(CalendarActionNode(id="c"), upload_event, "user-1")

        request, _ = calendar_client.created[0]
        assert request.summary == "File Review: report.pdf"
        assert request.start_time == FIXED_NOW
        assert request.end_time - request.start_time == timedelta(minutes=60)
        assert request.calendar_id == "primary"

    async def test_missing_connector(
        self,
        email_credentials: Credentials,
        email_client: RecordingEmailClient,
        calendar_client: RecordingCalendarClient,
        upload_event: TriggerEvent,
    ) -> None:
        connectors = InMemoryConnectorResolver({Capability.EMAIL: email_credentials})
        dispatcher = ActionDispatcher(connectors, email_client, calendar_client)

        result = await dispatcher.execute_action(CalendarActionNode(id="c"), upload_event, "user-1")

        assert not result.success
        assert result.message == "No active calendar connector found"
        assert calendar_client.created == []


@pytest.mark.unit
class TestUnsupportedKind:
    """Tests for nodes without a handler."""

    async def test_unknown_kind_raises(self, dispatcher: ActionDispatcher, upload_event: TriggerEvent) -> None:
        class SmsActionNode(Node):
            kind: ClassVar[str] = "sms-action"

        with pytest.raises(UnsupportedActionKindError, match="Unknown action type: sms-action"):
            await dispatcher.execute_action(SmsActionNode(id="s"), upload_event, "user-1")
