"""Application factory.

Run with any ASGI server, e.g.::

    uvicorn acc_workflows.app:create_app --factory
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from litestar import Litestar, get
from litestar.logging.config import LoggingConfig
from litestar.plugins.sqlalchemy import AsyncSessionConfig, SQLAlchemyAsyncConfig, SQLAlchemyPlugin

from acc_workflows.__metadata__ import __version__
from acc_workflows.db.models import WorkflowModel
from acc_workflows.plugin import AutomationPlugin, AutomationPluginConfig
from acc_workflows.settings import Settings, get_settings

if TYPE_CHECKING:
    import httpx

__all__ = ["create_app", "health"]

NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite")


@get("/health", tags=["Health"])
async def health() -> dict[str, str]:
    """Report liveness and the running version."""
    return {"status": "ok", "version": __version__}


def _logging_config(settings: Settings) -> LoggingConfig:
    level = "DEBUG" if settings.debug else settings.log_level
    return LoggingConfig(
        root={"level": level, "handlers": ["queue_listener"]},
        loggers={name: {"level": "WARNING", "propagate": True} for name in NOISY_LOGGERS},
        log_exceptions="always",
    )


def create_app(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Litestar:
    """Build the Litestar application.

    Args:
        settings: Application settings. Defaults to :func:`get_settings`.
        http_client: Optional HTTP client used for the Google APIs.

    Returns:
        The configured application.
    """
    settings = settings or get_settings()

    db_config = SQLAlchemyAsyncConfig(
        connection_string=settings.database_url,
        metadata=WorkflowModel.metadata,
        create_all=settings.database_create_all,
        before_send_handler="autocommit",
        session_config=AsyncSessionConfig(expire_on_commit=False),
    )

    return Litestar(
        route_handlers=[health],
        plugins=[
            SQLAlchemyPlugin(config=db_config),
            AutomationPlugin(config=AutomationPluginConfig(settings=settings, http_client=http_client)),
        ],
        logging_config=_logging_config(settings),
        debug=settings.debug,
    )
