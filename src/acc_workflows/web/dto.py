"""Data Transfer Objects for the automation web API.

This module defines DTOs for serializing and deserializing workflows,
connectors and execution records in REST API requests and responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from acc_workflows.db.models import ConnectorModel, WorkflowExecutionModel, WorkflowModel

__all__ = [
    "ConnectorDTO",
    "CreateConnectorDTO",
    "CreateWorkflowDTO",
    "ExecuteWorkflowDTO",
    "TestEmailDTO",
    "TestEventDTO",
    "UpdateWorkflowDTO",
    "WorkflowDTO",
    "WorkflowExecutionDTO",
]


@dataclass
class CreateWorkflowDTO:
    """DTO for creating a workflow.

    Attributes:
        name: Workflow name.
        nodes: Node mappings, in the stored or the graph editor shape.
        edges: Edge mappings (``source``, ``target``).
        description: Optional description.
    """

    name: str
    nodes: list[dict[str, Any]]
    edges: list[dict[str, Any]] = field(default_factory=list)
    description: str | None = None


@dataclass
class UpdateWorkflowDTO:
    """DTO for a partial workflow update; omitted fields keep their value."""

    name: str | None = None
    description: str | None = None
    nodes: list[dict[str, Any]] | None = None
    edges: list[dict[str, Any]] | None = None


@dataclass
class WorkflowDTO:
    """DTO for a stored workflow.

    Attributes:
        id: Workflow ID.
        name: Workflow name.
        description: Optional description.
        nodes: Stored nodes.
        edges: Stored edges.
        trigger_kind: ``triggerType`` of the trigger node.
        is_active: False once deleted.
        created_at: Creation timestamp.
        updated_at: Timestamp of the last change.
    """

    id: UUID
    name: str
    description: str | None
    nodes: list[dict[str, Any]]
    edges: list[dict[str, Any]]
    trigger_kind: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, model: WorkflowModel) -> WorkflowDTO:
        return cls(
            id=model.id,
            name=model.name,
            description=model.description,
            nodes=list(model.nodes or []),
            edges=list(model.edges or []),
            trigger_kind=model.trigger_kind,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


@dataclass
class ExecuteWorkflowDTO:
    """DTO for running one workflow against an event.

    Attributes:
        event: Event fields (filename, projectId, folderId, projectName, ...).
    """

    event: dict[str, Any] = field(default_factory=dict)


@dataclass
class WorkflowExecutionDTO:
    """DTO for an execution record."""

    id: UUID
    workflow_id: UUID
    status: str
    input_data: dict[str, Any]
    execution_steps: list[dict[str, Any]]
    result: dict[str, Any] | None
    error: str | None
    started_at: datetime | None
    completed_at: datetime | None
    duration_ms: int | None

    @classmethod
    def from_model(cls, model: WorkflowExecutionModel) -> WorkflowExecutionDTO:
        return cls(
            id=model.id,
            workflow_id=model.workflow_id,
            status=str(model.status),
            input_data=dict(model.input_data or {}),
            execution_steps=list(model.execution_steps or []),
            result=model.result,
            error=model.error,
            started_at=model.started_at,
            completed_at=model.completed_at,
            duration_ms=model.duration_ms,
        )


@dataclass
class CreateConnectorDTO:
    """DTO for storing credentials obtained from an identity provider.

    Attributes:
        connector_type: ``acc``, ``gmail`` or ``google-calendar``.
        name: Display name.
        access_token: Current bearer token.
        refresh_token: Token used to obtain new access tokens.
        expires_at: Expiry of ``access_token``.
        scope: Granted OAuth scopes.
        account_id: Provider-side account identifier.
        account_name: Provider-side account display name.
    """

    connector_type: str
    name: str
    access_token: str
    refresh_token: str
    expires_at: datetime
    scope: str | None = None
    account_id: str | None = None
    account_name: str | None = None


@dataclass
class ConnectorDTO:
    """DTO for a connector; tokens are never exposed."""

    id: UUID
    connector_type: str
    name: str
    expires_at: datetime
    is_active: bool
    scope: str | None = None
    account_id: str | None = None
    account_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, model: ConnectorModel) -> ConnectorDTO:
        return cls(
            id=model.id,
            connector_type=str(model.connector_type),
            name=model.name,
            expires_at=model.expires_at,
            is_active=model.is_active,
            scope=model.scope,
            account_id=model.account_id,
            account_name=model.account_name,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


@dataclass
class TestEmailDTO:
    """DTO for sending a test email through the owner's Gmail connector."""

    __test__ = False

    to: str
    subject: str
    body: str
    cc: str | None = None
    bcc: str | None = None


@dataclass
class TestEventDTO:
    """DTO for creating a test event through the owner's calendar connector."""

    __test__ = False

    summary: str
    start_time: datetime
    end_time: datetime
    description: str | None = None
    attendees: list[str] = field(default_factory=list)
