"""Core protocols for acc-workflows.

This module defines the Protocol-based interfaces of the interpreter's external
collaborators: the workflow store, the connector resolver and the notification
clients. Using Protocol keeps the interpreter independent of the database and
of any particular HTTP client while maintaining type safety.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from acc_workflows.core.definition import WorkflowDefinition
    from acc_workflows.core.models import Credentials
    from acc_workflows.core.notifications import CalendarEventRequest, CreatedEvent, OutgoingEmail, SentEmail
    from acc_workflows.core.types import Capability

__all__ = ["CalendarClient", "ConnectorResolver", "EmailClient", "WorkflowStore"]


@runtime_checkable
class WorkflowStore(Protocol):
    """Read access to persisted workflow definitions.

    Example:
        >>> class InMemoryStore:
        ...     def __init__(self, definitions):
        ...         self.definitions = definitions
        ...
        ...     async def find_active_by_owner_and_trigger_kind(self, owner_id, trigger_kind):
        ...         return [
        ...             d
        ...             for d in self.definitions
        ...             if d.active and d.owner_id == owner_id and d.trigger_kind == trigger_kind
        ...         ]
    """

    async def find_active_by_owner_and_trigger_kind(
        self,
        owner_id: str,
        trigger_kind: str,
    ) -> Sequence[WorkflowDefinition]:
        """Find the owner's active definitions whose trigger declares ``trigger_kind``.

        Args:
            owner_id: Owner of the definitions.
            trigger_kind: Exact trigger kind, e.g. ``file-upload``.

        Returns:
            Matching definitions, possibly empty.
        """
        ...


@runtime_checkable
class ConnectorResolver(Protocol):
    """Lookup of an owner's stored connector credentials."""

    async def find_active_connector(self, owner_id: str, capability: Capability) -> Credentials | None:
        """Find the owner's active connector for ``capability``.

        Args:
            owner_id: Owner of the connector.
            capability: Capability required by the action.

        Returns:
            The connector credentials, or None if the owner has none.
        """
        ...


@runtime_checkable
class EmailClient(Protocol):
    """Outbound email provider."""

    async def send_email(self, message: OutgoingEmail, credentials: Credentials) -> SentEmail:
        """Send one email, refreshing the access token first if needed.

        Args:
            message: The email to send.
            credentials: The owner's email connector credentials.

        Returns:
            The provider response, with refreshed credentials if a refresh happened.

        Raises:
            NotificationClientError: If the provider call fails.
        """
        ...


@runtime_checkable
class CalendarClient(Protocol):
    """Outbound calendar provider."""

    async def create_event(self, event: CalendarEventRequest, credentials: Credentials) -> CreatedEvent:
        """Create one calendar event, refreshing the access token first if needed.

        Args:
            event: The event to create.
            credentials: The owner's calendar connector credentials.

        Returns:
            The provider response, with refreshed credentials if a refresh happened.

        Raises:
            NotificationClientError: If the provider call fails.
        """
        ...
