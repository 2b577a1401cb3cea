"""ACC Workflows - file-upload automations for construction document projects.

This package lets an owner connect a document cloud, Gmail and Google Calendar
and define "when a file is uploaded, send an email / create a calendar event"
workflows as a small node graph.

Key Features:
    - Trigger filters on project, folder and file type
    - Placeholder templates for email and calendar text
    - Per-action and per-workflow failure isolation
    - Litestar plugin with REST endpoints and SQLAlchemy persistence

Example:
    >>> from acc_workflows import TriggerEvent, WorkflowDefinition, WorkflowExecutor
    >>>
    >>> definition = WorkflowDefinition.from_dict(
    ...     {
    ...         "name": "Notify on PDF",
    ...         "nodes": [
    ...             {"id": "t", "kind": "trigger", "config": {"triggerType": "file-upload", "fileTypes": ["*.pdf"]}},
    ...             {"id": "e", "kind": "email-action", "config": {"to": "pm@example.com"}},
    ...         ],
    ...     },
    ...     owner_id="user-1",
    ... )
    >>> outcome = await executor.execute_workflow(definition, TriggerEvent.file_upload(filename="plan.pdf"), "user-1")
"""

from __future__ import annotations

from acc_workflows.__metadata__ import __project__, __version__
from acc_workflows.core.definition import WorkflowDefinition
from acc_workflows.core.events import FILE_UPLOAD, TriggerEvent
from acc_workflows.core.models import ActionOutcome, ExecutionSummary, WorkflowOutcome
from acc_workflows.engine.actions import ActionDispatcher
from acc_workflows.engine.executor import WorkflowExecutor
from acc_workflows.exceptions import (
    AutomationError,
    ConnectorMissingError,
    ConnectorNotFoundError,
    ExecutionNotFoundError,
    InvalidTransitionError,
    NoTriggerNodeError,
    NotificationClientError,
    TokenRefreshError,
    UnsupportedActionKindError,
    WorkflowNotFoundError,
    WorkflowValidationError,
)
from acc_workflows.plugin import AutomationPlugin, AutomationPluginConfig

__all__ = (
    "FILE_UPLOAD",
    "ActionDispatcher",
    "ActionOutcome",
    "AutomationError",
    "AutomationPlugin",
    "AutomationPluginConfig",
    "ConnectorMissingError",
    "ConnectorNotFoundError",
    "ExecutionNotFoundError",
    "ExecutionSummary",
    "InvalidTransitionError",
    "NoTriggerNodeError",
    "NotificationClientError",
    "TokenRefreshError",
    "TriggerEvent",
    "UnsupportedActionKindError",
    "WorkflowDefinition",
    "WorkflowExecutor",
    "WorkflowNotFoundError",
    "WorkflowOutcome",
    "WorkflowValidationError",
    "__project__",
    "__version__",
)
