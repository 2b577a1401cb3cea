"""Core domain module for acc-workflows.

This module exports the fundamental building blocks for automation definitions,
including types, protocols, events, definitions and outcome records.
"""

from __future__ import annotations

from acc_workflows.core.definition import (
    CalendarActionNode,
    Edge,
    EmailActionNode,
    Node,
    TriggerNode,
    WorkflowDefinition,
    node_from_dict,
)
from acc_workflows.core.events import FILE_UPLOAD, TriggerEvent
from acc_workflows.core.models import ActionOutcome, ActionResult, Credentials, ExecutionSummary, WorkflowOutcome
from acc_workflows.core.notifications import CalendarEventRequest, CreatedEvent, OutgoingEmail, SentEmail
from acc_workflows.core.protocols import CalendarClient, ConnectorResolver, EmailClient, WorkflowStore
from acc_workflows.core.types import (
    Capability,
    ConnectorType,
    ExecutionStatus,
    NodeKind,
    StepStatus,
)

__all__ = [
    "FILE_UPLOAD",
    "ActionOutcome",
    "ActionResult",
    "CalendarActionNode",
    "CalendarClient",
    "CalendarEventRequest",
    "Capability",
    "ConnectorResolver",
    "ConnectorType",
    "CreatedEvent",
    "Credentials",
    "Edge",
    "EmailActionNode",
    "EmailClient",
    "ExecutionStatus",
    "ExecutionSummary",
    "Node",
    "NodeKind",
    "OutgoingEmail",
    "SentEmail",
    "StepStatus",
    "TriggerEvent",
    "TriggerNode",
    "WorkflowDefinition",
    "WorkflowOutcome",
    "WorkflowStore",
    "node_from_dict",
]
