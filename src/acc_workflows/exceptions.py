"""Exception hierarchy for acc-workflows."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

__all__ = (
    "AutomationError",
    "ConnectorMissingError",
    "ConnectorNotFoundError",
    "ExecutionNotFoundError",
    "InvalidTransitionError",
    "NoTriggerNodeError",
    "NotificationClientError",
    "TokenRefreshError",
    "UnsupportedActionKindError",
    "WorkflowNotFoundError",
    "WorkflowValidationError",
)


class AutomationError(Exception):
    """Base exception for all acc-workflows errors.

    All exceptions raised by acc-workflows should inherit from this class.
    This allows callers to catch all automation-related errors with a single except clause.
    """


class WorkflowNotFoundError(AutomationError):
    """Raised when a workflow definition is not found for the requesting owner.

    Inactive (soft-deleted) definitions are reported as not found as well.

    Attributes:
        workflow_id: The ID of the workflow that was not found.
    """

    def __init__(self, workflow_id: str | UUID) -> None:
        """Initialize the exception with workflow details.

        Args:
            workflow_id: The ID of the workflow that was not found.
        """
        self.workflow_id = workflow_id
        super().__init__(f"Workflow '{workflow_id}' not found")


class ExecutionNotFoundError(AutomationError):
    """Raised when an execution record is not found.

    Attributes:
        execution_id: The ID of the execution record that was not found.
    """

    def __init__(self, execution_id: str | UUID) -> None:
        """Initialize the exception with execution details.

        Args:
            execution_id: The ID of the execution record that was not found.
        """
        self.execution_id = execution_id
        super().__init__(f"Execution '{execution_id}' not found")


class ConnectorNotFoundError(AutomationError):
    """Raised when a stored connector is not found for the requesting owner.

    Attributes:
        connector_id: The ID of the connector that was not found.
    """

    def __init__(self, connector_id: str | UUID) -> None:
        """Initialize the exception with connector details.

        Args:
            connector_id: The ID of the connector that was not found.
        """
        self.connector_id = connector_id
        super().__init__(f"Connector '{connector_id}' not found")


class ConnectorMissingError(AutomationError):
    """Raised when an owner has no active connector for a required capability.

    An email action needs an active Gmail connector and a calendar action needs an
    active Google Calendar connector. The missing connector fails that single action
    only; sibling actions still run.

    Attributes:
        capability: The capability that could not be resolved.
        owner_id: The owner whose connector was looked up.
    """

    def __init__(self, capability: str, owner_id: str | None = None) -> None:
        """Initialize the exception with connector lookup details.

        Args:
            capability: The capability that could not be resolved.
            owner_id: The owner whose connector was looked up.
        """
        self.capability = capability
        self.owner_id = owner_id
        super().__init__(f"No active {capability} connector found")


class UnsupportedActionKindError(AutomationError):
    """Raised when an action node has a kind the dispatcher cannot execute.

    Attributes:
        kind: The unrecognized node kind.
        node_id: The ID of the offending node, if known.
    """

    def __init__(self, kind: str, node_id: str | None = None) -> None:
        """Initialize the exception with node details.

        Args:
            kind: The unrecognized node kind.
            node_id: The ID of the offending node, if known.
        """
        self.kind = kind
        self.node_id = node_id
        super().__init__(f"Unknown action type: {kind}")


class NoTriggerNodeError(AutomationError):
    """Raised when a workflow definition being executed has no trigger node.

    Write-time validation should prevent this, but stored definitions are not
    trusted blindly. The error fails that one workflow only.

    Attributes:
        workflow_id: The ID of the malformed workflow.
    """

    def __init__(self, workflow_id: str | UUID | None = None) -> None:
        """Initialize the exception with workflow details.

        Args:
            workflow_id: The ID of the malformed workflow.
        """
        self.workflow_id = workflow_id
        super().__init__("No trigger node found in workflow")


class NotificationClientError(AutomationError):
    """Raised when an outbound call to a notification provider fails.

    This wraps network, authentication and provider errors. It is never retried.

    Attributes:
        provider: Name of the provider that failed (e.g. ``gmail``).
        status_code: HTTP status returned by the provider, if any.
    """

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        """Initialize the exception with provider details.

        Args:
            provider: Name of the provider that failed.
            message: The provider's error message.
            status_code: HTTP status returned by the provider, if any.
        """
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class TokenRefreshError(NotificationClientError):
    """Raised when an expired access token cannot be refreshed."""

    def __init__(self, provider: str, message: str = "Failed to refresh token", status_code: int | None = None) -> None:
        """Initialize the exception with provider details.

        Args:
            provider: Name of the provider whose token endpoint failed.
            message: Error message describing the failure.
            status_code: HTTP status returned by the token endpoint, if any.
        """
        super().__init__(provider, message, status_code)


class InvalidTransitionError(AutomationError):
    """Raised when an execution record is moved backwards in its lifecycle.

    Execution records only progress forward: pending, running, then completed or failed.

    Attributes:
        from_status: The current status.
        to_status: The requested status.
    """

    def __init__(self, from_status: str, to_status: str) -> None:
        """Initialize the exception with transition details.

        Args:
            from_status: The current status.
            to_status: The requested status.
        """
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid transition from '{from_status}' to '{to_status}'")


class WorkflowValidationError(AutomationError):
    """Raised when workflow definition validation fails.

    This occurs when a definition is created or updated and doesn't meet the
    required constraints (missing trigger, edges between the wrong node kinds,
    unknown node kinds).

    Attributes:
        errors: List of validation error messages.
    """

    def __init__(self, errors: list[str]) -> None:
        """Initialize the exception with validation errors.

        Args:
            errors: List of validation error messages.
        """
        self.errors = errors
        super().__init__(f"Workflow validation failed: {'; '.join(errors)}")
