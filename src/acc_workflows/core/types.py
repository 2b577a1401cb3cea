"""Core type definitions for acc-workflows.

This module defines the fundamental enums used throughout
the automation system.
"""

from __future__ import annotations

import sys
from enum import Enum

# StrEnum backport for Python < 3.11
if sys.version_info >= (3, 11):
    from enum import StrEnum
else:

    class StrEnum(str, Enum):
        """String enumeration compatibility for Python < 3.11."""

        def __str__(self) -> str:
            return str(self.value)


__all__ = [
    "Capability",
    "ConnectorType",
    "ExecutionStatus",
    "NodeKind",
    "StepStatus",
]


class NodeKind(StrEnum):
    """Kinds of nodes a workflow graph may contain.

    Attributes:
        TRIGGER: The single event precondition of a workflow.
        EMAIL_ACTION: Sends an email through the owner's Gmail connector.
        CALENDAR_ACTION: Creates an event through the owner's Google Calendar connector.
    """

    TRIGGER = "trigger"
    EMAIL_ACTION = "email-action"
    CALENDAR_ACTION = "calendar-action"

    @classmethod
    def parse(cls, value: str) -> NodeKind:
        """Parse a node kind, accepting the graph editor's legacy names.

        Args:
            value: Raw kind string as stored or submitted.

        Returns:
            The matching NodeKind.

        Raises:
            ValueError: If the value names no known kind.
        """
        return cls(_LEGACY_NODE_KINDS.get(value, value))


_LEGACY_NODE_KINDS: dict[str, str] = {
    "acc-trigger": NodeKind.TRIGGER.value,
    "gmail-action": NodeKind.EMAIL_ACTION.value,
}


class ExecutionStatus(StrEnum):
    """Lifecycle status of a persisted workflow execution.

    Status only ever moves forward; there are no retries or resumption.

    Attributes:
        PENDING: Record created, orchestrator not yet invoked.
        RUNNING: Orchestrator is executing the workflow.
        COMPLETED: Orchestrator returned; individual actions may still have failed.
        FAILED: Orchestrator raised before producing an outcome.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is allowed."""
        return self in {ExecutionStatus.COMPLETED, ExecutionStatus.FAILED}

    def can_transition_to(self, target: ExecutionStatus) -> bool:
        """Check whether moving to ``target`` respects forward-only progression.

        Args:
            target: The requested next status.

        Returns:
            True if the transition is allowed.
        """
        return target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS: dict[ExecutionStatus, frozenset[ExecutionStatus]] = {
    ExecutionStatus.PENDING: frozenset({ExecutionStatus.RUNNING, ExecutionStatus.FAILED}),
    ExecutionStatus.RUNNING: frozenset({ExecutionStatus.COMPLETED, ExecutionStatus.FAILED}),
    ExecutionStatus.COMPLETED: frozenset(),
    ExecutionStatus.FAILED: frozenset(),
}


class StepStatus(StrEnum):
    """Outcome of a single action step inside an execution record."""

    COMPLETED = "completed"
    FAILED = "failed"


class ConnectorType(StrEnum):
    """External account types a user can connect.

    Attributes:
        ACC: The construction-document cloud.
        GMAIL: Google mail, used by email actions.
        GOOGLE_CALENDAR: Google calendar, used by calendar actions.
    """

    ACC = "acc"
    GMAIL = "gmail"
    GOOGLE_CALENDAR = "google-calendar"


class Capability(StrEnum):
    """Capabilities an action can require from a connector."""

    DOCUMENTS = "documents"
    EMAIL = "email"
    CALENDAR = "calendar"

    @property
    def connector_type(self) -> ConnectorType:
        """The connector type that provides this capability."""
        return _CAPABILITY_CONNECTORS[self]


_CAPABILITY_CONNECTORS: dict[Capability, ConnectorType] = {
    Capability.DOCUMENTS: ConnectorType.ACC,
    Capability.EMAIL: ConnectorType.GMAIL,
    Capability.CALENDAR: ConnectorType.GOOGLE_CALENDAR,
}
