"""Database persistence layer for acc-workflows.

This module provides SQLAlchemy models and repositories for persisting
workflows, connectors and execution records.
"""

from __future__ import annotations

from acc_workflows.db.models import ConnectorModel, WorkflowExecutionModel, WorkflowModel
from acc_workflows.db.repositories import (
    ConnectorRepository,
    WorkflowExecutionRepository,
    WorkflowRepository,
    credentials_from_model,
    definition_from_model,
    steps_from_outcome,
)

__all__ = [
    "ConnectorModel",
    "ConnectorRepository",
    "WorkflowExecutionModel",
    "WorkflowExecutionRepository",
    "WorkflowModel",
    "WorkflowRepository",
    "credentials_from_model",
    "definition_from_model",
    "steps_from_outcome",
]
