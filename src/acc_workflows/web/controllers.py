"""REST API controllers for automation management.

This module provides the controller classes of the REST layer:
- WorkflowController: Manage workflows and run them explicitly
- EventController: Feed external events (file uploads) to the owner's workflows
- ConnectorController: Manage and test connector credentials
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar
from uuid import UUID

from litestar import Controller, delete, get, post, put
from litestar.exceptions import ValidationException
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK

from acc_workflows.clients.calendar import GoogleCalendarClient  # noqa: TC001 - needed for DI
from acc_workflows.clients.gmail import GmailClient  # noqa: TC001 - needed for DI
from acc_workflows.clients.google import GoogleTokenRefresher  # noqa: TC001 - needed for DI
from acc_workflows.core.definition import WorkflowDefinition
from acc_workflows.core.events import TriggerEvent
from acc_workflows.core.notifications import CalendarEventRequest, OutgoingEmail
from acc_workflows.core.types import Capability, ConnectorType, ExecutionStatus
from acc_workflows.db.models import ConnectorModel, WorkflowExecutionModel
from acc_workflows.db.repositories import (
    ConnectorRepository,
    WorkflowExecutionRepository,
    WorkflowRepository,
    credentials_from_model,
    definition_from_model,
)
from acc_workflows.engine.executor import WorkflowExecutor  # noqa: TC001 - needed for DI
from acc_workflows.exceptions import ConnectorMissingError
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

if TYPE_CHECKING:
    from collections.abc import Sequence

    from acc_workflows.core.models import Credentials

__all__ = [
    "ConnectorController",
    "EventController",
    "WorkflowController",
]

logger = logging.getLogger(__name__)

REFRESHABLE_CONNECTOR_TYPES = frozenset({ConnectorType.GMAIL, ConnectorType.GOOGLE_CALENDAR})


async def _persist_refreshed(
    connector_repo: ConnectorRepository,
    credentials: Sequence[Credentials | None],
) -> None:
    for refreshed in credentials:
        if refreshed is not None:
            await connector_repo.update_credentials(refreshed)


class WorkflowController(Controller):
    """API controller for workflows.

    Provides CRUD endpoints for the owner's workflows, explicit runs and the
    execution records those runs produce.

    Tags: Workflows
    """

    path = "/workflows"
    tags: ClassVar[list[str]] = ["Workflows"]

    @get("/")
    async def list_workflows(self, owner_id: str, workflow_repo: WorkflowRepository) -> list[WorkflowDTO]:
        """List the owner's active workflows, most recently updated first.

        Args:
            owner_id: Injected owner ID.
            workflow_repo: Injected workflow repository.

        Returns:
            List of workflow DTOs.
        """
        workflows = await workflow_repo.list_active_for_owner(owner_id)
        return [WorkflowDTO.from_model(workflow) for workflow in workflows]

    @get("/{workflow_id:uuid}")
    async def get_workflow(
        self,
        workflow_id: UUID,
        owner_id: str,
        workflow_repo: WorkflowRepository,
    ) -> WorkflowDTO:
        """Get one of the owner's workflows.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist or was deleted.
        """
        workflow = await workflow_repo.get_active_for_owner(workflow_id, owner_id)
        return WorkflowDTO.from_model(workflow)

    @post("/", dto=None, return_dto=None)
    async def create_workflow(
        self,
        data: CreateWorkflowDTO,
        owner_id: str,
        workflow_repo: WorkflowRepository,
    ) -> WorkflowDTO:
        """Create a workflow after validating its graph.

        Args:
            data: Workflow name, nodes and edges.
            owner_id: Injected owner ID.
            workflow_repo: Injected workflow repository.

        Returns:
            The created workflow.

        Raises:
            WorkflowValidationError: If a node cannot be parsed or the graph is invalid.
        """
        definition = WorkflowDefinition.from_dict(
            {"name": data.name, "description": data.description, "nodes": data.nodes, "edges": data.edges},
            owner_id=owner_id,
        )
        definition.ensure_valid()

        workflow = await workflow_repo.save_definition(definition)
        logger.info("Created workflow %s for owner %s", workflow.id, owner_id)
        return WorkflowDTO.from_model(workflow)

    @put("/{workflow_id:uuid}", dto=None, return_dto=None)
    async def update_workflow(
        self,
        workflow_id: UUID,
        data: UpdateWorkflowDTO,
        owner_id: str,
        workflow_repo: WorkflowRepository,
    ) -> WorkflowDTO:
        """Update a workflow; omitted fields keep their stored value.

        The merged workflow is validated as a whole before it is saved.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist or was deleted.
            WorkflowValidationError: If the merged graph is invalid.
        """
        workflow = await workflow_repo.get_active_for_owner(workflow_id, owner_id)
        definition = WorkflowDefinition.from_dict(
            {
                "name": data.name if data.name is not None else workflow.name,
                "description": data.description if data.description is not None else workflow.description,
                "nodes": data.nodes if data.nodes is not None else workflow.nodes,
                "edges": data.edges if data.edges is not None else workflow.edges,
            },
            owner_id=owner_id,
            id=workflow.id,
        )
        definition.ensure_valid()

        workflow = await workflow_repo.save_definition(definition, workflow)
        return WorkflowDTO.from_model(workflow)

    @delete("/{workflow_id:uuid}")
    async def delete_workflow(
        self,
        workflow_id: UUID,
        owner_id: str,
        workflow_repo: WorkflowRepository,
    ) -> None:
        """Soft-delete a workflow; it no longer runs or appears in listings."""
        await workflow_repo.soft_delete(workflow_id, owner_id)
        logger.info("Deleted workflow %s for owner %s", workflow_id, owner_id)

    @post("/{workflow_id:uuid}/execute", status_code=HTTP_200_OK, dto=None, return_dto=None)
    async def execute_workflow(
        self,
        workflow_id: UUID,
        data: ExecuteWorkflowDTO,
        owner_id: str,
        workflow_repo: WorkflowRepository,
        execution_repo: WorkflowExecutionRepository,
        connector_repo: ConnectorRepository,
        workflow_executor: WorkflowExecutor,
    ) -> WorkflowExecutionDTO:
        """Run one workflow against the supplied event and record the run.

        Trigger conditions are still evaluated. The record ends ``completed``
        when the run returns, even if individual actions failed, and ``failed``
        only when the run itself raised.

        Args:
            workflow_id: The workflow ID.
            data: The event to run against.
            owner_id: Injected owner ID.
            workflow_repo: Injected workflow repository.
            execution_repo: Injected execution repository.
            connector_repo: Injected connector repository.
            workflow_executor: Injected workflow executor.

        Returns:
            The execution record.
        """
        workflow = await workflow_repo.get_active_for_owner(workflow_id, owner_id)
        definition = definition_from_model(workflow)
        event = TriggerEvent(kind=definition.trigger_kind or "manual", fields=data.event)

        execution = await execution_repo.add(
            WorkflowExecutionModel(
                workflow_id=workflow.id,
                owner_id=owner_id,
                status=ExecutionStatus.PENDING,
                input_data=event.to_dict(),
                execution_steps=[],
            )
        )
        await execution_repo.transition(execution, ExecutionStatus.RUNNING)

        try:
            outcome = await workflow_executor.execute_workflow(definition, event, owner_id)
        except Exception as e:
            logger.exception("Execution %s of workflow %s failed", execution.id, workflow.id)
            execution = await execution_repo.transition(execution, ExecutionStatus.FAILED, error=str(e))
            return WorkflowExecutionDTO.from_model(execution)

        await _persist_refreshed(connector_repo, outcome.refreshed_credentials)
        execution = await execution_repo.record_outcome(execution, outcome)
        return WorkflowExecutionDTO.from_model(execution)

    @get("/{workflow_id:uuid}/executions")
    async def list_executions(
        self,
        workflow_id: UUID,
        owner_id: str,
        execution_repo: WorkflowExecutionRepository,
        limit: int = Parameter(
            default=50,
            ge=1,
            le=100,
            description="Maximum number of results",
        ),
        offset: int = Parameter(
            default=0,
            ge=0,
            description="Number of results to skip",
        ),
    ) -> list[WorkflowExecutionDTO]:
        """List the owner's execution records of a workflow, newest first."""
        executions, _ = await execution_repo.find_by_workflow(workflow_id, owner_id, limit=limit, offset=offset)
        return [WorkflowExecutionDTO.from_model(execution) for execution in executions]

    @get("/executions/{execution_id:uuid}")
    async def get_execution(
        self,
        execution_id: UUID,
        owner_id: str,
        execution_repo: WorkflowExecutionRepository,
    ) -> WorkflowExecutionDTO:
        """Get one of the owner's execution records.

        Raises:
            ExecutionNotFoundError: If the record does not exist.
        """
        execution = await execution_repo.get_for_owner(execution_id, owner_id)
        return WorkflowExecutionDTO.from_model(execution)


class EventController(Controller):
    """API controller for incoming trigger events.

    Upload and ingestion handlers post here whenever a qualifying external
    event occurs.

    Tags: Events
    """

    path = "/events"
    tags: ClassVar[list[str]] = ["Events"]

    @post("/{trigger_kind:str}", status_code=HTTP_200_OK)
    async def receive_event(
        self,
        trigger_kind: str,
        data: dict[str, Any],
        owner_id: str,
        connector_repo: ConnectorRepository,
        workflow_executor: WorkflowExecutor,
    ) -> dict[str, Any]:
        """Run every active workflow of the owner that declares ``trigger_kind``.

        Args:
            trigger_kind: Kind of the event, e.g. ``file-upload``.
            data: Event fields.
            owner_id: Injected owner ID.
            connector_repo: Injected connector repository.
            workflow_executor: Injected workflow executor.

        Returns:
            The execution summary.
        """
        event = TriggerEvent(kind=trigger_kind, fields=data)
        summary = await workflow_executor.execute_workflows(trigger_kind, event, owner_id)
        await _persist_refreshed(connector_repo, summary.refreshed_credentials)
        return summary.to_dict()


class ConnectorController(Controller):
    """API controller for connectors.

    Tokens are accepted when a connector is stored but never returned.

    Tags: Connectors
    """

    path = "/connectors"
    tags: ClassVar[list[str]] = ["Connectors"]

    @get("/")
    async def list_connectors(self, owner_id: str, connector_repo: ConnectorRepository) -> list[ConnectorDTO]:
        """List the owner's active connectors without their tokens."""
        connectors = await connector_repo.list_active_for_owner(owner_id)
        return [ConnectorDTO.from_model(connector) for connector in connectors]

    @post("/", dto=None, return_dto=None)
    async def save_connector(
        self,
        data: CreateConnectorDTO,
        owner_id: str,
        connector_repo: ConnectorRepository,
    ) -> ConnectorDTO:
        """Store credentials obtained from an identity provider.

        An existing connector of the same type is updated in place.

        Raises:
            ValidationException: If the connector type is unknown.
        """
        try:
            connector_type = ConnectorType(data.connector_type)
        except ValueError as e:
            raise ValidationException(detail=f"Unsupported connector type '{data.connector_type}'") from e

        connector = await connector_repo.get_one_or_none(
            ConnectorModel.owner_id == owner_id,
            ConnectorModel.connector_type == connector_type,
        )
        if connector is None:
            connector = ConnectorModel(owner_id=owner_id, connector_type=connector_type)
            is_new = True
        else:
            is_new = False

        connector.name = data.name
        connector.access_token = data.access_token
        connector.refresh_token = data.refresh_token
        connector.expires_at = data.expires_at
        connector.scope = data.scope
        connector.account_id = data.account_id
        connector.account_name = data.account_name
        connector.is_active = True

        if is_new:
            connector = await connector_repo.add(connector, auto_refresh=True)
        else:
            connector = await connector_repo.update(connector, auto_refresh=True)
        logger.info("Stored %s connector %s for owner %s", connector_type, connector.id, owner_id)
        return ConnectorDTO.from_model(connector)

    @delete("/{connector_id:uuid}")
    async def delete_connector(
        self,
        connector_id: UUID,
        owner_id: str,
        connector_repo: ConnectorRepository,
    ) -> None:
        """Delete one of the owner's connectors.

        Raises:
            ConnectorNotFoundError: If the connector does not exist.
        """
        connector = await connector_repo.get_for_owner(connector_id, owner_id)
        await connector_repo.delete(connector.id)

    @post("/{connector_id:uuid}/refresh", status_code=HTTP_200_OK)
    async def refresh_connector(
        self,
        connector_id: UUID,
        owner_id: str,
        connector_repo: ConnectorRepository,
        token_refresher: GoogleTokenRefresher,
    ) -> ConnectorDTO:
        """Refresh a connector's access token now.

        Raises:
            ConnectorNotFoundError: If the connector does not exist.
            ValidationException: If the connector type cannot be refreshed here.
            TokenRefreshError: If the token endpoint rejects the refresh.
        """
        connector = await connector_repo.get_for_owner(connector_id, owner_id)
        if connector.connector_type not in REFRESHABLE_CONNECTOR_TYPES:
            raise ValidationException(detail="Unsupported connector type")

        refreshed = await token_refresher.refresh(credentials_from_model(connector))
        connector = await connector_repo.update_credentials(refreshed) or connector
        logger.info("Refreshed connector %s for owner %s", connector.id, owner_id)
        return ConnectorDTO.from_model(connector)

    @post("/gmail/test-email", status_code=HTTP_200_OK, dto=None, return_dto=None)
    async def send_test_email(
        self,
        data: TestEmailDTO,
        owner_id: str,
        connector_repo: ConnectorRepository,
        email_client: GmailClient,
    ) -> dict[str, Any]:
        """Send a test email through the owner's Gmail connector.

        Raises:
            ConnectorMissingError: If the owner has no active Gmail connector.
            NotificationClientError: If Gmail rejects the request.
        """
        credentials = await connector_repo.find_active_connector(owner_id, Capability.EMAIL)
        if credentials is None:
            raise ConnectorMissingError(str(Capability.EMAIL), owner_id)

        sent = await email_client.send_email(
            OutgoingEmail(to=data.to, subject=data.subject, body=data.body, cc=data.cc, bcc=data.bcc),
            credentials,
        )
        await _persist_refreshed(connector_repo, [sent.refreshed_credentials])
        return {"success": True, "message": "Test email sent successfully", "messageId": sent.message_id}

    @post("/google-calendar/test-event", status_code=HTTP_200_OK, dto=None, return_dto=None)
    async def create_test_event(
        self,
        data: TestEventDTO,
        owner_id: str,
        connector_repo: ConnectorRepository,
        calendar_client: GoogleCalendarClient,
    ) -> dict[str, Any]:
        """Create a test event through the owner's Google Calendar connector.

        Raises:
            ConnectorMissingError: If the owner has no active calendar connector.
            ValidationException: If the event ends before it starts.
            NotificationClientError: If Google Calendar rejects the request.
        """
        if data.end_time < data.start_time:
            raise ValidationException(detail="End time must not be before start time")

        credentials = await connector_repo.find_active_connector(owner_id, Capability.CALENDAR)
        if credentials is None:
            raise ConnectorMissingError(str(Capability.CALENDAR), owner_id)

        created = await calendar_client.create_event(
            CalendarEventRequest(
                summary=data.summary,
                description=data.description or "Test event created via ACC Workflow App",
                start_time=data.start_time,
                end_time=data.end_time,
                attendees=data.attendees,
            ),
            credentials,
        )
        await _persist_refreshed(connector_repo, [created.refreshed_credentials])
        return {
            "success": True,
            "message": "Test event created successfully",
            "eventId": created.event_id,
            "eventLink": created.link,
        }
