"""SQLAlchemy models for automation persistence.

This module defines the database models backing the REST layer and the
interpreter's store and resolver:
- WorkflowModel: Stores an owner's workflow graph (nodes and edges)
- ConnectorModel: Stores an owner's OAuth credentials for one external service
- WorkflowExecutionModel: Records one explicit run of a workflow
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from advanced_alchemy.base import UUIDAuditBase
from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from acc_workflows.core.types import ConnectorType, ExecutionStatus

__all__ = [
    "ConnectorModel",
    "WorkflowExecutionModel",
    "WorkflowModel",
]


# Cross-database JSON type: uses JSONB for PostgreSQL, JSON for others (SQLite, MySQL, etc.)
JSONType = JSON().with_variant(JSONB, "postgresql")


class WorkflowModel(UUIDAuditBase):
    """Persisted workflow definition owned by one user.

    Attributes:
        owner_id: Owner of the workflow.
        name: Display name.
        description: Optional description.
        nodes: Serialized nodes (``id``, ``kind``, ``position``, ``label``, ``config``).
        edges: Serialized edges (``id``, ``source``, ``target``).
        trigger_kind: Denormalized ``triggerType`` of the trigger node, for lookup.
        is_active: False once the workflow has been deleted.
        executions: Recorded explicit runs.
    """

    __tablename__ = "automation_workflows"
    __table_args__ = (
        Index("ix_automation_workflows_owner_active", "owner_id", "is_active"),
        Index("ix_automation_workflows_owner_trigger", "owner_id", "trigger_kind", "is_active"),
    )

    owner_id: Mapped[str] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    nodes: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, default=list)
    edges: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, default=list)
    trigger_kind: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True)

    # Relationships
    executions: Mapped[list[WorkflowExecutionModel]] = relationship(
        back_populates="workflow",
        lazy="noload",
    )


class ConnectorModel(UUIDAuditBase):
    """Stored OAuth credentials granting access to one external service.

    Attributes:
        owner_id: Owner of the connector.
        connector_type: External service (``acc``, ``gmail``, ``google-calendar``).
        name: Display name.
        access_token: Current bearer token.
        refresh_token: Token used to obtain a new access token.
        expires_at: Expiry of ``access_token``.
        scope: Granted OAuth scopes.
        account_id: Provider-side account identifier.
        account_name: Provider-side account display name.
        is_active: Inactive connectors are never used by actions.
    """

    __tablename__ = "automation_connectors"
    __table_args__ = (Index("ix_automation_connectors_owner_type", "owner_id", "connector_type", "is_active"),)

    owner_id: Mapped[str] = mapped_column(String(255))
    connector_type: Mapped[ConnectorType] = mapped_column(
        Enum(ConnectorType, native_enum=False, length=50, values_callable=lambda e: [m.value for m in e]),
    )
    name: Mapped[str] = mapped_column(String(255))
    access_token: Mapped[str] = mapped_column(Text)
    refresh_token: Mapped[str] = mapped_column(Text)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    scope: Mapped[str | None] = mapped_column(Text, nullable=True)
    account_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(default=True)


class WorkflowExecutionModel(UUIDAuditBase):
    """Record of one explicit workflow run.

    Attributes:
        workflow_id: Foreign key to the workflow.
        owner_id: Owner who requested the run.
        status: Lifecycle status (pending, running, completed, failed).
        input_data: The trigger event fields.
        execution_steps: One entry per dispatched action.
        result: Serialized workflow outcome.
        error: Error message if the run raised.
        started_at: Timestamp when the run began.
        completed_at: Timestamp when the run finished.
        duration_ms: Wall-clock duration of the run.
    """

    __tablename__ = "automation_workflow_executions"
    __table_args__ = (
        Index("ix_automation_executions_workflow_id", "workflow_id"),
        Index("ix_automation_executions_owner_id", "owner_id"),
        Index("ix_automation_executions_status", "status"),
    )

    workflow_id: Mapped[UUID] = mapped_column(
        ForeignKey("automation_workflows.id", ondelete="CASCADE"),
    )
    owner_id: Mapped[str] = mapped_column(String(255))
    status: Mapped[ExecutionStatus] = mapped_column(
        Enum(ExecutionStatus, native_enum=False, length=50, values_callable=lambda e: [m.value for m in e]),
        default=ExecutionStatus.PENDING,
    )
    input_data: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)
    execution_steps: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, default=list)
    result: Mapped[dict[str, Any] | None] = mapped_column(JSONType, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    workflow: Mapped[WorkflowModel] = relationship(
        back_populates="executions",
        lazy="noload",
    )
