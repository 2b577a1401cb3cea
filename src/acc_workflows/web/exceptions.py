"""Exception handling for automation web endpoints.

This module maps domain exceptions raised by the repositories, the
interpreter and the notification clients to HTTP responses.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar import Response
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from acc_workflows.exceptions import (
    AutomationError,
    ConnectorMissingError,
    ConnectorNotFoundError,
    ExecutionNotFoundError,
    InvalidTransitionError,
    NotificationClientError,
    WorkflowNotFoundError,
    WorkflowValidationError,
)

if TYPE_CHECKING:  # pragma: no cover
    from litestar import Request

__all__ = ["automation_error_handler", "status_code_for"]

logger = logging.getLogger(__name__)

_STATUS_CODES: tuple[tuple[type[AutomationError], int], ...] = (
    (WorkflowValidationError, HTTP_400_BAD_REQUEST),
    (WorkflowNotFoundError, HTTP_404_NOT_FOUND),
    (ExecutionNotFoundError, HTTP_404_NOT_FOUND),
    (ConnectorNotFoundError, HTTP_404_NOT_FOUND),
    (ConnectorMissingError, HTTP_404_NOT_FOUND),
    (InvalidTransitionError, HTTP_409_CONFLICT),
    (NotificationClientError, HTTP_502_BAD_GATEWAY),
)


def status_code_for(exc: AutomationError) -> int:
    """Return the HTTP status code for a domain exception."""
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return HTTP_500_INTERNAL_SERVER_ERROR


def automation_error_handler(
    _request: Request,
    exc: AutomationError,
) -> Response:
    """Exception handler for :class:`AutomationError`.

    Args:
        request: The Litestar request object.
        exc: The raised domain exception.

    Returns:
        JSON response with ``success: false`` and the error message.
    """
    status_code = status_code_for(exc)
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Request failed: %s", exc)

    content: dict[str, object] = {"success": False, "message": str(exc)}
    if isinstance(exc, WorkflowValidationError):
        content["errors"] = exc.errors
    return Response(
        content=content,
        status_code=status_code,
        media_type="application/json",
    )
