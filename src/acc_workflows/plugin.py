"""Litestar plugin for automation integration.

This module provides the AutomationPlugin, which wires the repositories, the
notification clients and the interpreter into a Litestar application and
mounts the REST controllers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx
from litestar import Request  # noqa: TC002 - needed for DI
from litestar.di import Provide
from litestar.exceptions import NotAuthorizedException
from litestar.plugins import InitPluginProtocol
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002 - needed for DI

from acc_workflows.clients.calendar import GoogleCalendarClient
from acc_workflows.clients.gmail import GmailClient
from acc_workflows.clients.google import GoogleTokenRefresher
from acc_workflows.db.repositories import ConnectorRepository, WorkflowExecutionRepository, WorkflowRepository
from acc_workflows.engine.actions import ActionDispatcher
from acc_workflows.engine.executor import WorkflowExecutor
from acc_workflows.exceptions import AutomationError
from acc_workflows.settings import Settings, get_settings

if TYPE_CHECKING:
    from litestar.config.app import AppConfig

__all__ = ["AutomationPlugin", "AutomationPluginConfig"]

logger = logging.getLogger(__name__)


@dataclass
class AutomationPluginConfig:
    """Configuration for the AutomationPlugin.

    Attributes:
        settings: Application settings. Defaults to :func:`get_settings`.
        http_client: Optional pre-configured HTTP client for the Google APIs.
            If not provided, one is created and closed on shutdown.
        owner_header: Request header carrying the authenticated owner ID.
            Defaults to ``settings.owner_header``.
        enable_api: Whether to enable the REST API endpoints. Defaults to True.
        api_path_prefix: URL path prefix for all API endpoints.
            Defaults to ``settings.api_path_prefix``.
        api_guards: List of Litestar guards to apply to all API endpoints.
        api_tags: OpenAPI tags to apply to the API endpoints.
        include_api_in_schema: Whether to include API endpoints in OpenAPI schema.
            Defaults to True.
    """

    settings: Settings | None = None
    http_client: httpx.AsyncClient | None = None
    owner_header: str | None = None
    enable_api: bool = True
    api_path_prefix: str | None = None
    api_guards: list[Any] = field(default_factory=list)
    api_tags: list[str] = field(default_factory=lambda: ["Automation"])
    include_api_in_schema: bool = True


class AutomationPlugin(InitPluginProtocol):
    """Litestar plugin for workflow automation.

    The plugin expects a ``db_session`` dependency, as provided by Litestar's
    SQLAlchemy plugin.

    Example:
        Basic usage::

            from litestar import Litestar
            from litestar.plugins.sqlalchemy import SQLAlchemyAsyncConfig, SQLAlchemyPlugin
            from acc_workflows import AutomationPlugin

            app = Litestar(
                plugins=[
                    SQLAlchemyPlugin(config=SQLAlchemyAsyncConfig(connection_string="sqlite+aiosqlite:///db.sqlite3")),
                    AutomationPlugin(),
                ]
            )

        Running the owner's workflows from an upload handler::

            @post("/uploads")
            async def upload(data: UploadDTO, owner_id: str, workflow_executor: WorkflowExecutor) -> dict:
                event = TriggerEvent.file_upload(filename=data.filename, projectId=data.project_id)
                summary = await workflow_executor.execute_workflows(FILE_UPLOAD, event, owner_id)
                return summary.to_dict()
    """

    __slots__ = ("_calendar_client", "_config", "_email_client", "_http_client", "_owns_http_client", "_refresher")

    def __init__(self, config: AutomationPluginConfig | None = None) -> None:
        """Initialize the plugin.

        Args:
            config: Optional configuration for the plugin.
        """
        self._config = config or AutomationPluginConfig()
        self._http_client: httpx.AsyncClient | None = None
        self._owns_http_client = False
        self._refresher: GoogleTokenRefresher | None = None
        self._email_client: GmailClient | None = None
        self._calendar_client: GoogleCalendarClient | None = None

    @property
    def email_client(self) -> GmailClient:
        """Get the Gmail client.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._email_client is None:
            msg = "AutomationPlugin has not been initialized. Access clients after app startup."
            raise RuntimeError(msg)
        return self._email_client

    @property
    def calendar_client(self) -> GoogleCalendarClient:
        """Get the Google Calendar client.

        Raises:
            RuntimeError: If accessed before plugin initialization.
        """
        if self._calendar_client is None:
            msg = "AutomationPlugin has not been initialized. Access clients after app startup."
            raise RuntimeError(msg)
        return self._calendar_client

    async def _close_http_client(self) -> None:
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            logger.debug("Closed Google API HTTP client")

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Initialize the plugin when the Litestar app starts.

        This method:
        1. Creates or uses the provided HTTP client and builds the Google clients
        2. Adds dependency providers for the owner, repositories, clients and executor
        3. Optionally registers REST API controllers if enable_api=True
        4. Registers the domain exception handler

        Args:
            app_config: The Litestar application configuration.

        Returns:
            The modified application configuration.
        """
        settings = self._config.settings or get_settings()
        owner_header = self._config.owner_header or settings.owner_header

        # Initialize clients
        if self._config.http_client is not None:
            self._http_client = self._config.http_client
        else:
            self._http_client = httpx.AsyncClient(timeout=settings.http_timeout)
            self._owns_http_client = True
            app_config.on_shutdown.append(self._close_http_client)

        self._email_client = GmailClient.from_settings(settings, self._http_client)
        self._calendar_client = GoogleCalendarClient.from_settings(settings, self._http_client)
        self._refresher = self._email_client.refresher

        # Create dependency providers
        def provide_owner_id(request: Request) -> str:
            owner_id = request.headers.get(owner_header)
            if not owner_id:
                raise NotAuthorizedException(detail=f"Missing {owner_header} header")
            return owner_id

        def provide_workflow_repo(db_session: AsyncSession) -> WorkflowRepository:
            return WorkflowRepository(session=db_session)

        def provide_connector_repo(db_session: AsyncSession) -> ConnectorRepository:
            return ConnectorRepository(session=db_session)

        def provide_execution_repo(db_session: AsyncSession) -> WorkflowExecutionRepository:
            return WorkflowExecutionRepository(session=db_session)

        def provide_email_client() -> GmailClient:
            return self.email_client

        def provide_calendar_client() -> GoogleCalendarClient:
            return self.calendar_client

        def provide_token_refresher() -> GoogleTokenRefresher:
            return self._refresher  # type: ignore[return-value]

        def provide_executor(
            workflow_repo: WorkflowRepository,
            connector_repo: ConnectorRepository,
        ) -> WorkflowExecutor:
            dispatcher = ActionDispatcher(connector_repo, self.email_client, self.calendar_client)
            return WorkflowExecutor(workflow_repo, dispatcher)

        # Add dependencies to app config
        providers = {
            "owner_id": provide_owner_id,
            "workflow_repo": provide_workflow_repo,
            "connector_repo": provide_connector_repo,
            "execution_repo": provide_execution_repo,
            "email_client": provide_email_client,
            "calendar_client": provide_calendar_client,
            "token_refresher": provide_token_refresher,
            "workflow_executor": provide_executor,
        }
        for key, provider in providers.items():
            app_config.dependencies[key] = Provide(provider, sync_to_thread=False)

        # Register REST API controllers if enabled
        if self._config.enable_api:
            from litestar import Router

            from acc_workflows.web.controllers import ConnectorController, EventController, WorkflowController

            prefix = self._config.api_path_prefix if self._config.api_path_prefix is not None else settings.api_path_prefix
            api_router = Router(
                path=prefix or "/",
                route_handlers=[WorkflowController, EventController, ConnectorController],
                guards=self._config.api_guards,
                tags=self._config.api_tags,
                include_in_schema=self._config.include_api_in_schema,
            )
            app_config.route_handlers.append(api_router)

        # Register exception handler
        from acc_workflows.web.exceptions import automation_error_handler

        app_config.exception_handlers[AutomationError] = automation_error_handler  # type: ignore[assignment]

        return app_config
