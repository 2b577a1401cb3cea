"""Workflow execution orchestrator.

This module runs stored workflow definitions against trigger events. Failures
are contained at the smallest scope they occur in: a failing action never stops
its siblings, and a failing workflow never affects other workflows.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from acc_workflows.core.models import ActionOutcome, ActionResult, ExecutionSummary, WorkflowOutcome
from acc_workflows.engine.matcher import matches
from acc_workflows.exceptions import NoTriggerNodeError

if TYPE_CHECKING:
    from acc_workflows.core.definition import WorkflowDefinition
    from acc_workflows.core.events import TriggerEvent
    from acc_workflows.core.protocols import WorkflowStore
    from acc_workflows.engine.actions import ActionDispatcher

__all__ = ["WorkflowExecutor"]

logger = logging.getLogger(__name__)

NO_WORKFLOWS_MESSAGE = "No workflows to execute"
CONDITIONS_NOT_MET_MESSAGE = "Trigger conditions not met"
WORKFLOW_SUCCESS_MESSAGE = "Workflow executed successfully"


class WorkflowExecutor:
    """Run an owner's workflows for incoming trigger events.

    Attributes:
        store: Source of the owner's active workflow definitions.
        dispatcher: Executes individual action nodes.
    """

    def __init__(self, store: WorkflowStore, dispatcher: ActionDispatcher) -> None:
        self.store = store
        self.dispatcher = dispatcher

    async def execute_workflows(self, trigger_kind: str, event: TriggerEvent, owner_id: str) -> ExecutionSummary:
        """Run every active workflow of the owner declaring ``trigger_kind``.

        Workflows run one after another. An exception raised while running one
        workflow is recorded as that workflow's failed outcome.

        Args:
            trigger_kind: Kind of the event, e.g. ``file-upload``.
            event: The event payload.
            owner_id: Owner whose workflows are considered.

        Returns:
            The aggregate summary. ``success`` is False only when the workflows
            could not be loaded.

        Example:
            >>> summary = await executor.execute_workflows(
            ...     "file-upload", TriggerEvent.file_upload(filename="plan.pdf"), "user-1"
            ... )
            >>> summary.message
            'Executed 1 workflows'
        """
        try:
            definitions = list(await self.store.find_active_by_owner_and_trigger_kind(owner_id, trigger_kind))
        except Exception as e:
            logger.exception("Failed to load %s workflows for owner %s", trigger_kind, owner_id)
            return ExecutionSummary(success=False, message=str(e))

        if not definitions:
            logger.debug("No %s workflows for owner %s", trigger_kind, owner_id)
            return ExecutionSummary(success=True, message=NO_WORKFLOWS_MESSAGE)

        logger.info("Running %d %s workflows for owner %s", len(definitions), trigger_kind, owner_id)
        results: list[WorkflowOutcome] = []
        for definition in definitions:
            try:
                outcome = await self.execute_workflow(definition, event, owner_id)
            except Exception as e:
                logger.exception("Workflow %s (%s) failed", definition.id, definition.name)
                outcome = WorkflowOutcome(success=False, message=str(e))
            outcome.workflow_id = definition.id
            outcome.workflow_name = definition.name
            results.append(outcome)

        return ExecutionSummary(success=True, message=f"Executed {len(results)} workflows", results=results)

    async def execute_workflow(
        self,
        definition: WorkflowDefinition,
        event: TriggerEvent,
        owner_id: str,
    ) -> WorkflowOutcome:
        """Run one workflow if its trigger conditions hold.

        Every action node runs in stored order. An action that raises is
        recorded as a failed outcome and the remaining actions still run.

        Args:
            definition: The workflow to run.
            event: The event payload.
            owner_id: Owner whose connectors are used.

        Returns:
            The workflow outcome.

        Raises:
            NoTriggerNodeError: If the definition has no trigger node.
        """
        trigger = definition.trigger_node
        if trigger is None:
            raise NoTriggerNodeError(definition.id)

        if not matches(trigger.config, event):
            logger.debug("Workflow %s skipped: trigger conditions not met", definition.id)
            return WorkflowOutcome(
                success=True,
                message=CONDITIONS_NOT_MET_MESSAGE,
                workflow_id=definition.id,
                workflow_name=definition.name,
            )

        actions: list[ActionOutcome] = []
        for node in definition.action_nodes:
            started_at = datetime.now(timezone.utc)
            try:
                result = await self.dispatcher.execute_action(node, event, owner_id)
            except Exception as e:
                logger.exception("Action %s of workflow %s raised", node.id, definition.id)
                result = ActionResult(success=False, message=str(e))
            actions.append(
                ActionOutcome.from_result(
                    node.id,
                    str(node.kind),
                    result,
                    started_at=started_at,
                    completed_at=datetime.now(timezone.utc),
                )
            )

        logger.info(
            "Workflow %s ran %d actions (%d failed)",
            definition.id,
            len(actions),
            sum(1 for action in actions if not action.success),
        )
        return WorkflowOutcome(
            success=True,
            message=WORKFLOW_SUCCESS_MESSAGE,
            actions=actions,
            workflow_id=definition.id,
            workflow_name=definition.name,
        )
