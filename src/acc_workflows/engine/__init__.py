"""Workflow matching and execution.

This module provides the interpreter that decides whether a workflow applies to
an event, renders action text and dispatches actions to notification clients.
"""

from __future__ import annotations

from acc_workflows.engine.actions import ActionDispatcher, compute_start_time
from acc_workflows.engine.executor import WorkflowExecutor
from acc_workflows.engine.matcher import file_extension, matches, normalize_file_types
from acc_workflows.engine.templates import PLACEHOLDERS, render

__all__ = [
    "PLACEHOLDERS",
    "ActionDispatcher",
    "WorkflowExecutor",
    "compute_start_time",
    "file_extension",
    "matches",
    "normalize_file_types",
    "render",
]
