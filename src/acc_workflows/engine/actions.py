"""Action dispatch.

Maps each action node kind to exactly one outbound call against the matching
notification client. There is no fallthrough: a node kind without a handler is
rejected with :class:`~acc_workflows.exceptions.UnsupportedActionKindError`.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, cast

from acc_workflows.core.models import ActionResult
from acc_workflows.core.notifications import CalendarEventRequest, OutgoingEmail
from acc_workflows.core.types import Capability, NodeKind
from acc_workflows.engine.templates import render
from acc_workflows.exceptions import AutomationError, ConnectorMissingError, UnsupportedActionKindError

if TYPE_CHECKING:
    from acc_workflows.core.definition import CalendarActionNode, EmailActionNode, Node
    from acc_workflows.core.events import TriggerEvent
    from acc_workflows.core.models import Credentials
    from acc_workflows.core.protocols import CalendarClient, ConnectorResolver, EmailClient

__all__ = ["ActionDispatcher", "compute_start_time"]

logger = logging.getLogger(__name__)

NEXT_DAY_HOUR = 9


def _local_now() -> datetime:
    return datetime.now().astimezone()


def compute_start_time(symbol: str | None, now: datetime) -> datetime:
    """Resolve a symbolic start offset relative to ``now``.

    Args:
        symbol: ``15min``, ``1hour`` or ``next-day``; anything else means now.
        now: Reference time in the owner's local zone.

    Returns:
        The event start time.
    """
    if symbol == "15min":
        return now + timedelta(minutes=15)
    if symbol == "1hour":
        return now + timedelta(hours=1)
    if symbol == "next-day":
        return (now + timedelta(days=1)).replace(hour=NEXT_DAY_HOUR, minute=0, second=0, microsecond=0)
    return now


class ActionDispatcher:
    """Execute action nodes against the owner's connectors.

    Attributes:
        connectors: Resolves the owner's credentials per capability.
        email_client: Client used by email actions.
        calendar_client: Client used by calendar actions.
        clock: Returns the current local time; injectable for tests.
    """

    def __init__(
        self,
        connectors: ConnectorResolver,
        email_client: EmailClient,
        calendar_client: CalendarClient,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.connectors = connectors
        self.email_client = email_client
        self.calendar_client = calendar_client
        self.clock = clock
        self._handlers: dict[str, Callable[[Node, TriggerEvent, str], Awaitable[ActionResult]]] = {
            NodeKind.EMAIL_ACTION: self._send_email,
            NodeKind.CALENDAR_ACTION: self._create_event,
        }

    async def execute_action(self, node: Node, event: TriggerEvent, owner_id: str) -> ActionResult:
        """Run one action node.

        Missing connectors and provider failures are returned as failed results;
        only an unknown node kind raises.

        Args:
            node: The action node.
            event: The triggering event.
            owner_id: Owner whose connectors are used.

        Returns:
            The action result.

        Raises:
            UnsupportedActionKindError: If no handler exists for the node kind.
        """
        handler = self._handlers.get(node.kind)
        if handler is None:
            raise UnsupportedActionKindError(str(node.kind), node.id)

        try:
            return await handler(node, event, owner_id)
        except AutomationError as e:
            logger.warning("Action %s (%s) failed: %s", node.id, node.kind, e)
            return ActionResult(success=False, message=str(e))

    async def _credentials_for(self, owner_id: str, capability: Capability) -> Credentials:
        credentials = await self.connectors.find_active_connector(owner_id, capability)
        if credentials is None:
            raise ConnectorMissingError(str(capability), owner_id)
        return credentials

    async def _send_email(self, node: Node, event: TriggerEvent, owner_id: str) -> ActionResult:
        email_node = cast("EmailActionNode", node)
        credentials = await self._credentials_for(owner_id, Capability.EMAIL)

        message = OutgoingEmail(
            subject=render(email_node.subject_template, event),
            body=render(email_node.body_template, event),
            **email_node.recipients,
        )
        sent = await self.email_client.send_email(message, credentials)
        logger.info("Email action %s sent message %s", email_node.id, sent.message_id)

        return ActionResult(
            success=True,
            message="Email sent successfully",
            data=sent.to_dict(),
            refreshed_credentials=sent.refreshed_credentials,
        )

    async def _create_event(self, node: Node, event: TriggerEvent, owner_id: str) -> ActionResult:
        calendar_node = cast("CalendarActionNode", node)
        credentials = await self._credentials_for(owner_id, Capability.CALENDAR)

        start_time = compute_start_time(calendar_node.start_time, self.clock())
        request = CalendarEventRequest(
            summary=render(calendar_node.summary_template, event),
            description=render(calendar_node.description_template, event),
            start_time=start_time,
            end_time=start_time + timedelta(minutes=calendar_node.duration_minutes),
            attendees=calendar_node.attendees,
        )
        created = await self.calendar_client.create_event(request, credentials)
        logger.info("Calendar action %s created event %s", calendar_node.id, created.event_id)

        return ActionResult(
            success=True,
            message="Calendar event created successfully",
            data=created.to_dict(),
            refreshed_credentials=created.refreshed_credentials,
        )
