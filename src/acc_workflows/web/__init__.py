"""REST layer for acc-workflows.

This module provides the Litestar controllers, DTOs and exception handling
mounted by :class:`~acc_workflows.plugin.AutomationPlugin`.
"""

from __future__ import annotations

from acc_workflows.web.controllers import ConnectorController, EventController, WorkflowController
from acc_workflows.web.dto import (
    ConnectorDTO,
    CreateConnectorDTO,
    CreateWorkflowDTO,
    ExecuteWorkflowDTO,
    TestEmailDTO,
    TestEventDTO,
    UpdateWorkflowDTO,
    WorkflowDTO,
    WorkflowExecutionDTO,
)
from acc_workflows.web.exceptions import automation_error_handler, status_code_for

__all__ = [
    "ConnectorController",
    "ConnectorDTO",
    "CreateConnectorDTO",
    "CreateWorkflowDTO",
    "EventController",
    "ExecuteWorkflowDTO",
    "TestEmailDTO",
    "TestEventDTO",
    "UpdateWorkflowDTO",
    "WorkflowController",
    "WorkflowDTO",
    "WorkflowExecutionDTO",
    "automation_error_handler",
    "status_code_for",
]
