"""Shared test fixtures for acc-workflows test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import pytest

from acc_workflows.core.definition import WorkflowDefinition
from acc_workflows.core.events import TriggerEvent
from acc_workflows.core.models import Credentials
from acc_workflows.core.notifications import CreatedEvent, SentEmail
from acc_workflows.core.types import Capability
from acc_workflows.engine.actions import ActionDispatcher
from acc_workflows.engine.executor import WorkflowExecutor
from acc_workflows.exceptions import NotificationClientError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncSession

    from acc_workflows.core.notifications import CalendarEventRequest, OutgoingEmail

OWNER_ID = "user-1"
FIXED_NOW = datetime(2026, 3, 10, 14, 30, tzinfo=timezone.utc)


def make_credentials(connector_type: str = "gmail", **overrides: Any) -> Credentials:
    """Build connector credentials that do not need a refresh."""
    values: dict[str, Any] = {
        "access_token": f"{connector_type}-access",
        "refresh_token": f"{connector_type}-refresh",
        "expires_at": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    values.update(overrides)
    return Credentials(**values)


def make_definition(
    name: str = "Notify on PDF",
    trigger_config: dict[str, Any] | None = None,
    actions: list[dict[str, Any]] | None = None,
    owner_id: str = OWNER_ID,
    **attrs: Any,
) -> WorkflowDefinition:
    """Build a workflow definition with one trigger and the given action nodes."""
    trigger = {"id": "trigger", "kind": "trigger", "config": {"triggerType": "file-upload", **(trigger_config or {})}}
    actions = actions if actions is not None else [{"id": "email", "kind": "email-action", "config": {"to": "pm@example.com"}}]
    return WorkflowDefinition.from_dict(
        {
            "name": name,
            "nodes": [trigger, *actions],
            "edges": [{"id": f"trigger-{a['id']}", "source": "trigger", "target": a["id"]} for a in actions],
        },
        owner_id=owner_id,
        **attrs,
    )


class InMemoryWorkflowStore:
    """Workflow store backed by a list of definitions."""

    def __init__(self, definitions: list[WorkflowDefinition] | None = None, error: Exception | None = None) -> None:
        self.definitions = definitions or []
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def find_active_by_owner_and_trigger_kind(self, owner_id: str, trigger_kind: str) -> list[WorkflowDefinition]:
        self.calls.append((owner_id, trigger_kind))
        if self.error is not None:
            raise self.error
        return [
            definition
            for definition in self.definitions
            if definition.active and definition.owner_id == owner_id and definition.trigger_kind == trigger_kind
        ]


class InMemoryConnectorResolver:
    """Connector resolver backed by a capability mapping."""

    def __init__(self, connectors: dict[Capability, Credentials] | None = None) -> None:
        self.connectors = connectors or {}

    async def find_active_connector(self, owner_id: str, capability: Capability) -> Credentials | None:
        return self.connectors.get(capability)


class RecordingEmailClient:
    """Email client that records messages instead of sending them."""

    def __init__(self, failures: list[Exception] | None = None, refreshed: Credentials | None = None) -> None:
        self.sent: list[tuple[OutgoingEmail, Credentials]] = []
        self.failures = list(failures or [])
        self.refreshed = refreshed

    async def send_email(self, message: OutgoingEmail, credentials: Credentials) -> SentEmail:
        self.sent.append((message, credentials))
        if self.failures:
            raise self.failures.pop(0)
        return SentEmail(
            message_id=f"msg-{len(self.sent)}",
            thread_id="thread-1",
            label_ids=["SENT"],
            refreshed_credentials=self.refreshed,
        )


class RecordingCalendarClient:
    """Calendar client that records events instead of creating them."""

    def __init__(self, failures: list[Exception] | None = None) -> None:
        self.created: list[tuple[CalendarEventRequest, Credentials]] = []
        self.failures = list(failures or [])

    async def create_event(self, event: CalendarEventRequest, credentials: Credentials) -> CreatedEvent:
        self.created.append((event, credentials))
        if self.failures:
            raise self.failures.pop(0)
        return CreatedEvent(
            event_id=f"evt-{len(self.created)}",
            link="https://calendar.google.com/event?eid=1",
            summary=event.summary,
        )


@pytest.fixture
def owner_id() -> str:
    """Owner used across tests."""
    return OWNER_ID


@pytest.fixture
def upload_event() -> TriggerEvent:
    """A typical PDF upload event."""
    return TriggerEvent.file_upload(
        filename="report.pdf",
        projectId="p-1",
        projectName="Tower A",
        folderId="f-1",
        folderName="Drawings",
        fileSize="2 MB",
        uploader="Ada",
    )


@pytest.fixture
def email_credentials() -> Credentials:
    return make_credentials("gmail")


@pytest.fixture
def calendar_credentials() -> Credentials:
    return make_credentials("google-calendar")


@pytest.fixture
def connectors(email_credentials: Credentials, calendar_credentials: Credentials) -> InMemoryConnectorResolver:
    """Resolver holding both an email and a calendar connector."""
    return InMemoryConnectorResolver({Capability.EMAIL: email_credentials, Capability.CALENDAR: calendar_credentials})


@pytest.fixture
def email_client() -> RecordingEmailClient:
    return RecordingEmailClient()


@pytest.fixture
def calendar_client() -> RecordingCalendarClient:
    return RecordingCalendarClient()


@pytest.fixture
def dispatcher(
    connectors: InMemoryConnectorResolver,
    email_client: RecordingEmailClient,
    calendar_client: RecordingCalendarClient,
) -> ActionDispatcher:
    """Dispatcher with a fixed clock."""
    return ActionDispatcher(connectors, email_client, calendar_client, clock=lambda: FIXED_NOW)


@pytest.fixture
def store() -> InMemoryWorkflowStore:
    return InMemoryWorkflowStore()


@pytest.fixture
def executor(store: InMemoryWorkflowStore, dispatcher: ActionDispatcher) -> WorkflowExecutor:
    return WorkflowExecutor(store, dispatcher)


@pytest.fixture
def provider_failure() -> NotificationClientError:
    return NotificationClientError("gmail", "Quota exceeded", 429)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def async_engine():
    """Create an async SQLite in-memory engine for testing."""
    from sqlalchemy import event
    from sqlalchemy.ext.asyncio import create_async_engine

    from acc_workflows.db.models import WorkflowModel

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(WorkflowModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine) -> AsyncIterator[AsyncSession]:
    """Create an async session for testing."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    session_maker = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_maker() as session:
        yield session
        await session.rollback()


def pytest_configure(config: Any) -> None:
    """Configure pytest with custom markers.

    Args:
        config: Pytest config object
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
