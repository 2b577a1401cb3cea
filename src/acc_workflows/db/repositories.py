"""Repository implementations for automation persistence.

This module provides async repositories for CRUD operations on the automation
models using advanced-alchemy's repository pattern. :class:`WorkflowRepository`
and :class:`ConnectorRepository` also satisfy the interpreter's
``WorkflowStore`` and ``ConnectorResolver`` protocols.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from uuid import UUID

from advanced_alchemy.filters import LimitOffset, OrderBy
from advanced_alchemy.repository import SQLAlchemyAsyncRepository
from sqlalchemy import and_, select

from acc_workflows.core.definition import WorkflowDefinition
from acc_workflows.core.models import Credentials
from acc_workflows.core.types import ExecutionStatus, StepStatus
from acc_workflows.db.models import ConnectorModel, WorkflowExecutionModel, WorkflowModel
from acc_workflows.exceptions import (
    ConnectorNotFoundError,
    ExecutionNotFoundError,
    InvalidTransitionError,
    WorkflowNotFoundError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from acc_workflows.core.models import WorkflowOutcome
    from acc_workflows.core.types import Capability

__all__ = [
    "ConnectorRepository",
    "WorkflowExecutionRepository",
    "WorkflowRepository",
    "credentials_from_model",
    "definition_from_model",
    "steps_from_outcome",
]


def definition_from_model(model: WorkflowModel) -> WorkflowDefinition:
    """Convert a stored workflow into the interpreter's definition.

    Raises:
        WorkflowValidationError: If a stored node cannot be parsed.
    """
    return WorkflowDefinition.from_dict(
        {"name": model.name, "description": model.description, "nodes": model.nodes, "edges": model.edges},
        owner_id=model.owner_id,
        id=model.id,
        active=model.is_active,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def credentials_from_model(model: ConnectorModel) -> Credentials:
    return Credentials(
        access_token=model.access_token,
        refresh_token=model.refresh_token,
        expires_at=model.expires_at,
        connector_id=model.id,
        scope=model.scope,
        account_id=model.account_id,
        account_name=model.account_name,
    )


def steps_from_outcome(outcome: WorkflowOutcome, input_data: dict[str, Any]) -> list[dict[str, Any]]:
    """Build execution step entries from the outcome of a workflow run."""
    return [
        {
            "step_id": action.node_id,
            "step_type": action.kind,
            "status": str(StepStatus.COMPLETED if action.success else StepStatus.FAILED),
            "input": input_data,
            "output": action.data,
            "error": None if action.success else action.message,
            "start_time": action.started_at.isoformat() if action.started_at else None,
            "end_time": action.completed_at.isoformat() if action.completed_at else None,
        }
        for action in outcome.actions
    ]


class WorkflowRepository(SQLAlchemyAsyncRepository[WorkflowModel]):
    """Repository for workflow CRUD operations.

    All lookups are scoped to one owner and ignore soft-deleted workflows.
    """

    model_type = WorkflowModel

    async def list_active_for_owner(self, owner_id: str) -> Sequence[WorkflowModel]:
        """List the owner's active workflows, most recently updated first.

        Args:
            owner_id: The owner ID.

        Returns:
            List of workflows.
        """
        stmt = (
            select(WorkflowModel)
            .where(and_(WorkflowModel.owner_id == owner_id, WorkflowModel.is_active == True))  # noqa: E712
            .order_by(WorkflowModel.updated_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_active_for_owner(self, workflow_id: UUID, owner_id: str) -> WorkflowModel:
        """Get one of the owner's active workflows.

        Args:
            workflow_id: The workflow ID.
            owner_id: The owner ID.

        Returns:
            The workflow.

        Raises:
            WorkflowNotFoundError: If no such active workflow belongs to the owner.
        """
        workflow = await self.get_one_or_none(
            WorkflowModel.id == workflow_id,
            WorkflowModel.owner_id == owner_id,
            WorkflowModel.is_active == True,  # noqa: E712
        )
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        return workflow

    async def find_active_by_owner_and_trigger_kind(
        self,
        owner_id: str,
        trigger_kind: str,
    ) -> list[WorkflowDefinition]:
        """Find the owner's active definitions whose trigger declares ``trigger_kind``.

        Args:
            owner_id: The owner ID.
            trigger_kind: Exact trigger kind, e.g. ``file-upload``.

        Returns:
            Matching definitions, most recently updated first.
        """
        stmt = (
            select(WorkflowModel)
            .where(
                and_(
                    WorkflowModel.owner_id == owner_id,
                    WorkflowModel.trigger_kind == trigger_kind,
                    WorkflowModel.is_active == True,  # noqa: E712
                )
            )
            .order_by(WorkflowModel.updated_at.desc())
        )
        result = await self.session.execute(stmt)
        return [definition_from_model(model) for model in result.scalars().all()]

    async def save_definition(self, definition: WorkflowDefinition, model: WorkflowModel | None = None) -> WorkflowModel:
        """Insert ``definition`` or write it over ``model``.

        Args:
            definition: A validated definition.
            model: Existing row to update, or None to insert a new one.

        Returns:
            The stored workflow.
        """
        is_new = model is None
        if model is None:
            model = WorkflowModel(owner_id=definition.owner_id, is_active=True)

        model.name = definition.name
        model.description = definition.description
        model.nodes = definition.nodes_to_json()
        model.edges = definition.edges_to_json()
        model.trigger_kind = definition.trigger_kind

        if is_new:
            return await self.add(model, auto_refresh=True)
        model.updated_at = datetime.now(timezone.utc)
        return await self.update(model, auto_refresh=True)

    async def soft_delete(self, workflow_id: UUID, owner_id: str) -> WorkflowModel:
        """Mark one of the owner's workflows as deleted.

        Raises:
            WorkflowNotFoundError: If no such active workflow belongs to the owner.
        """
        workflow = await self.get_active_for_owner(workflow_id, owner_id)
        workflow.is_active = False
        workflow.updated_at = datetime.now(timezone.utc)
        await self.session.flush()
        return workflow


class ConnectorRepository(SQLAlchemyAsyncRepository[ConnectorModel]):
    """Repository for connector CRUD operations."""

    model_type = ConnectorModel

    async def list_active_for_owner(self, owner_id: str) -> Sequence[ConnectorModel]:
        """List the owner's active connectors.

        Args:
            owner_id: The owner ID.

        Returns:
            List of connectors, oldest first.
        """
        stmt = (
            select(ConnectorModel)
            .where(and_(ConnectorModel.owner_id == owner_id, ConnectorModel.is_active == True))  # noqa: E712
            .order_by(ConnectorModel.created_at)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_for_owner(self, connector_id: UUID, owner_id: str) -> ConnectorModel:
        """Get one of the owner's connectors.

        Raises:
            ConnectorNotFoundError: If no such connector belongs to the owner.
        """
        connector = await self.get_one_or_none(
            ConnectorModel.id == connector_id,
            ConnectorModel.owner_id == owner_id,
        )
        if connector is None:
            raise ConnectorNotFoundError(connector_id)
        return connector

    async def find_active_model(self, owner_id: str, capability: Capability) -> ConnectorModel | None:
        """Find the owner's most recently updated active connector for ``capability``."""
        stmt = (
            select(ConnectorModel)
            .where(
                and_(
                    ConnectorModel.owner_id == owner_id,
                    ConnectorModel.connector_type == capability.connector_type,
                    ConnectorModel.is_active == True,  # noqa: E712
                )
            )
            .order_by(ConnectorModel.updated_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_active_connector(self, owner_id: str, capability: Capability) -> Credentials | None:
        """Find the owner's active connector credentials for ``capability``.

        Args:
            owner_id: The owner ID.
            capability: Capability required by an action.

        Returns:
            The credentials, or None if the owner has no such connector.
        """
        connector = await self.find_active_model(owner_id, capability)
        return credentials_from_model(connector) if connector else None

    async def update_credentials(self, credentials: Credentials) -> ConnectorModel | None:
        """Persist refreshed credentials onto their connector.

        Args:
            credentials: Refreshed credentials carrying ``connector_id``.

        Returns:
            The updated connector, or None if it no longer exists.
        """
        if credentials.connector_id is None:
            return None
        connector = await self.get_one_or_none(ConnectorModel.id == credentials.connector_id)
        if connector is None:
            return None
        connector.access_token = credentials.access_token
        connector.refresh_token = credentials.refresh_token
        connector.expires_at = credentials.expires_at
        connector.updated_at = datetime.now(timezone.utc)
        await self.session.flush()
        return connector


class WorkflowExecutionRepository(SQLAlchemyAsyncRepository[WorkflowExecutionModel]):
    """Repository for workflow execution records.

    Status changes go through :meth:`transition`, which only moves records
    forward through their lifecycle.
    """

    model_type = WorkflowExecutionModel

    async def find_by_workflow(
        self,
        workflow_id: UUID,
        owner_id: str,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[Sequence[WorkflowExecutionModel], int]:
        """Find the owner's executions of a workflow, newest first.

        Args:
            workflow_id: The workflow ID.
            owner_id: The owner ID.
            limit: Maximum number of results.
            offset: Number of results to skip.

        Returns:
            Tuple of (executions, total_count).
        """
        return await self.list_and_count(
            WorkflowExecutionModel.workflow_id == workflow_id,
            WorkflowExecutionModel.owner_id == owner_id,
            LimitOffset(limit=limit, offset=offset),
            OrderBy(field_name="created_at", sort_order="desc"),
        )

    async def get_for_owner(self, execution_id: UUID, owner_id: str) -> WorkflowExecutionModel:
        """Get one of the owner's execution records.

        Raises:
            ExecutionNotFoundError: If no such execution belongs to the owner.
        """
        execution = await self.get_one_or_none(
            WorkflowExecutionModel.id == execution_id,
            WorkflowExecutionModel.owner_id == owner_id,
        )
        if execution is None:
            raise ExecutionNotFoundError(execution_id)
        return execution

    async def transition(
        self,
        execution: WorkflowExecutionModel,
        status: ExecutionStatus,
        *,
        error: str | None = None,
    ) -> WorkflowExecutionModel:
        """Move an execution record to ``status``.

        Entering ``running`` stamps ``started_at``; entering a terminal status
        stamps ``completed_at`` and ``duration_ms``.

        Raises:
            InvalidTransitionError: If the move is not a forward transition.
        """
        current = ExecutionStatus(execution.status)
        if not current.can_transition_to(status):
            raise InvalidTransitionError(str(current), str(status))

        now = datetime.now(timezone.utc)
        execution.status = status
        if status == ExecutionStatus.RUNNING:
            execution.started_at = now
        if status.is_terminal:
            started_at = execution.started_at or now
            if started_at.tzinfo is None:
                started_at = started_at.replace(tzinfo=timezone.utc)
            execution.completed_at = now
            execution.duration_ms = int((now - started_at).total_seconds() * 1000)
        if error is not None:
            execution.error = error
        await self.session.flush()
        return execution

    async def record_outcome(
        self,
        execution: WorkflowExecutionModel,
        outcome: WorkflowOutcome,
    ) -> WorkflowExecutionModel:
        """Store a workflow outcome and complete the execution record."""
        execution.execution_steps = steps_from_outcome(outcome, execution.input_data)
        execution.result = outcome.to_dict()
        return await self.transition(execution, ExecutionStatus.COMPLETED)
