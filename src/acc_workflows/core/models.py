"""Concrete data models for acc-workflows.

This module provides the runtime records exchanged between the interpreter and
its collaborators: connector credentials and the per-action, per-workflow and
aggregate outcomes of an execution.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

__all__ = [
    "ActionOutcome",
    "ActionResult",
    "Credentials",
    "ExecutionSummary",
    "WorkflowOutcome",
]


@dataclass(frozen=True)
class Credentials:
    """OAuth credentials of one connector.

    Attributes:
        access_token: Bearer token sent to the provider.
        refresh_token: Token exchanged for a new access token once expired.
        expires_at: Expiry of ``access_token`` (timezone-aware).
        connector_id: ID of the stored connector these credentials belong to.
        scope: Granted OAuth scopes.
        account_id: Provider-side account identifier.
        account_name: Provider-side account display name.
    """

    access_token: str = field(repr=False)
    refresh_token: str = field(repr=False)
    expires_at: datetime
    connector_id: UUID | None = None
    scope: str | None = None
    account_id: str | None = None
    account_name: str | None = None

    def expires_within(self, seconds: float, now: datetime | None = None) -> bool:
        """Check whether the access token expires within ``seconds``.

        Args:
            seconds: Safety buffer before the actual expiry.
            now: Reference time, defaults to the current UTC time.

        Returns:
            True if the token should be refreshed before use.
        """
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now >= expires_at - timedelta(seconds=seconds)

    def refreshed(self, access_token: str, expires_at: datetime, refresh_token: str | None = None) -> Credentials:
        """Return a copy carrying a newly issued access token."""
        return replace(
            self,
            access_token=access_token,
            expires_at=expires_at,
            refresh_token=refresh_token or self.refresh_token,
        )


@dataclass
class ActionResult:
    """Result of dispatching one action node.

    Attributes:
        success: Whether the outbound call succeeded.
        message: Human-readable outcome.
        data: Provider response (message id, event id and link).
        refreshed_credentials: New credentials if the client refreshed the token;
            persisting them is up to the caller.
    """

    success: bool
    message: str
    data: dict[str, Any] | None = None
    refreshed_credentials: Credentials | None = None


@dataclass
class ActionOutcome:
    """Recorded outcome of one action node within a workflow run."""

    node_id: str
    kind: str
    success: bool
    message: str
    data: dict[str, Any] | None = None
    refreshed_credentials: Credentials | None = field(default=None, repr=False)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_result(
        cls,
        node_id: str,
        kind: str,
        result: ActionResult,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
    ) -> ActionOutcome:
        return cls(
            node_id=node_id,
            kind=kind,
            success=result.success,
            message=result.message,
            data=result.data,
            refreshed_credentials=result.refreshed_credentials,
            started_at=started_at,
            completed_at=completed_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "node_id": self.node_id,
            "kind": self.kind,
            "success": self.success,
            "message": self.message,
            "data": self.data,
        }


@dataclass
class WorkflowOutcome:
    """Outcome of one workflow run.

    Attributes:
        success: False only when the workflow could not be run at all.
        message: Human-readable outcome.
        actions: Outcomes of each dispatched action in execution order.
        workflow_id: ID of the workflow definition.
        workflow_name: Name of the workflow definition.
    """

    success: bool
    message: str
    actions: list[ActionOutcome] = field(default_factory=list)
    workflow_id: UUID | str | None = None
    workflow_name: str | None = None

    @property
    def refreshed_credentials(self) -> list[Credentials]:
        return [action.refreshed_credentials for action in self.actions if action.refreshed_credentials]

    def to_dict(self) -> dict[str, Any]:
        return {
            "workflow_id": str(self.workflow_id) if self.workflow_id is not None else None,
            "workflow_name": self.workflow_name,
            "success": self.success,
            "message": self.message,
            "actions": [action.to_dict() for action in self.actions],
        }


@dataclass
class ExecutionSummary:
    """Aggregate result of running every matching workflow for one event."""

    success: bool
    message: str
    results: list[WorkflowOutcome] = field(default_factory=list)

    @property
    def refreshed_credentials(self) -> list[Credentials]:
        return [credentials for outcome in self.results for credentials in outcome.refreshed_credentials]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "results": [outcome.to_dict() for outcome in self.results],
        }
