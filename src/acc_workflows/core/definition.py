"""Workflow definition, node and edge structures.

This module provides the data structures for defining automation graphs: the
closed family of node variants (one trigger, email and calendar actions), the
edges drawn between them in the editor, and the complete workflow definition.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

from acc_workflows.core.types import NodeKind
from acc_workflows.exceptions import WorkflowValidationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

__all__ = [
    "CalendarActionNode",
    "Edge",
    "EmailActionNode",
    "Node",
    "TriggerNode",
    "WorkflowDefinition",
    "node_from_dict",
    "parse_nodes",
]

DEFAULT_EMAIL_SUBJECT = "File uploaded: {{filename}}"
DEFAULT_EMAIL_BODY = "A new file has been uploaded"
DEFAULT_EVENT_SUMMARY = "File Review: {{filename}}"
DEFAULT_EVENT_DESCRIPTION = "Review meeting for the newly uploaded file"
DEFAULT_EVENT_DURATION_MINUTES = 60

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class Node:
    """Shared shape of every node in a workflow graph.

    Subclasses pin ``kind``; the set of subclasses is closed and parsing rejects
    anything else.

    Attributes:
        id: Identifier unique within the owning definition.
        config: Read-only configuration mapping edited in the graph editor.
        position: Editor canvas coordinates, ignored during execution.
        label: Optional display label.
    """

    kind: ClassVar[str]

    id: str
    config: Mapping[str, Any] = field(default_factory=dict)
    position: dict[str, float] | None = None
    label: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "config", MappingProxyType(dict(self.config)))

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a configuration value, treating empty strings as absent.

        Args:
            key: Configuration key.
            default: Value returned when the key is missing or empty.

        Returns:
            The configured value or the default.
        """
        value = self.config.get(key)
        if value is None or value == "":
            return default
        return value

    def to_dict(self) -> dict[str, Any]:
        """Serialize the node into its stored JSON shape."""
        return {
            "id": self.id,
            "kind": str(self.kind),
            "position": self.position,
            "label": self.label,
            "config": dict(self.config),
        }


@dataclass(frozen=True)
class TriggerNode(Node):
    """The event precondition of a workflow.

    Recognized config keys: ``triggerType``, ``projectId``, ``folderId`` and ``fileTypes``.
    """

    kind: ClassVar[str] = NodeKind.TRIGGER

    @property
    def trigger_kind(self) -> str | None:
        """Event category this trigger listens for, e.g. ``file-upload``."""
        return self.get("triggerType")


@dataclass(frozen=True)
class EmailActionNode(Node):
    """Send an email through the owner's email connector."""

    kind: ClassVar[str] = NodeKind.EMAIL_ACTION

    @property
    def recipients(self) -> dict[str, str | None]:
        """The ``to``, ``cc`` and ``bcc`` headers as configured."""
        return {"to": self.get("to"), "cc": self.get("cc"), "bcc": self.get("bcc")}

    @property
    def subject_template(self) -> str:
        return str(self.get("subject", DEFAULT_EMAIL_SUBJECT))

    @property
    def body_template(self) -> str:
        return str(self.get("body", DEFAULT_EMAIL_BODY))


@dataclass(frozen=True)
class CalendarActionNode(Node):
    """Create a calendar event through the owner's calendar connector."""

    kind: ClassVar[str] = NodeKind.CALENDAR_ACTION

    @property
    def summary_template(self) -> str:
        # the editor saves the summary under "title"
        return str(self.get("summary", self.get("title", DEFAULT_EVENT_SUMMARY)))

    @property
    def description_template(self) -> str:
        return str(self.get("description", DEFAULT_EVENT_DESCRIPTION))

    @property
    def start_time(self) -> str | None:
        """Symbolic start offset: ``15min``, ``1hour``, ``next-day`` or anything else for now."""
        return self.get("startTime")

    @property
    def duration_minutes(self) -> int:
        """Event length in minutes.

        Only the leading integer counts, so ``"45min"`` is 45 and ``"30.5"`` is 30.
        Missing values or values without a leading integer fall back to an hour.
        """
        raw = self.get("duration")
        if raw is None:
            return DEFAULT_EVENT_DURATION_MINUTES
        match = _LEADING_INTEGER.match(str(raw))
        return int(match.group(1)) if match else DEFAULT_EVENT_DURATION_MINUTES

    @property
    def attendees(self) -> list[str]:
        """Attendee addresses parsed from a comma-separated string."""
        raw = self.get("attendees", "")
        if isinstance(raw, str):
            raw = raw.split(",")
        return [str(address).strip() for address in raw if str(address).strip()]


_NODE_TYPES: dict[NodeKind, type[Node]] = {
    NodeKind.TRIGGER: TriggerNode,
    NodeKind.EMAIL_ACTION: EmailActionNode,
    NodeKind.CALENDAR_ACTION: CalendarActionNode,
}


def node_from_dict(data: Mapping[str, Any]) -> Node:
    """Build a node variant from its stored or submitted JSON shape.

    Both the stored shape (``kind`` + ``config``) and the graph editor shape
    (``type`` + ``data.config``) are accepted.

    Args:
        data: Raw node mapping.

    Returns:
        The node variant matching the declared kind.

    Raises:
        WorkflowValidationError: If the node has no id or an unknown kind.
    """
    node_id = data.get("id")
    raw_kind = data.get("kind") or data.get("type")
    if not node_id:
        raise WorkflowValidationError(["Node is missing an id"])
    try:
        kind = NodeKind.parse(str(raw_kind))
    except ValueError as e:
        raise WorkflowValidationError([f"Node '{node_id}' has unsupported kind '{raw_kind}'"]) from e

    editor_data = dict(data.get("data") or {})
    label = data.get("label") or editor_data.pop("label", None)
    config = data.get("config")
    if config is None:
        nested = editor_data.pop("config", None) or {}
        config = {**editor_data, **nested}

    return _NODE_TYPES[kind](
        id=str(node_id),
        config=config,
        position=data.get("position"),
        label=label,
    )


@dataclass(frozen=True)
class Edge:
    """A connection drawn from the trigger to an action in the editor.

    Edges are validated on write but do not decide which actions run.

    Attributes:
        id: Edge identifier.
        source: ID of the source node.
        target: ID of the target node.
    """

    id: str
    source: str
    target: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Edge:
        return cls(
            id=str(data.get("id") or f"{data.get('source')}-{data.get('target')}"),
            source=str(data.get("source", "")),
            target=str(data.get("target", "")),
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "source": self.source, "target": self.target}


@dataclass
class WorkflowDefinition:
    """An owner's automation: one trigger node and its action nodes.

    Attributes:
        name: Non-empty display name.
        owner_id: Identifier of the owning user.
        nodes: Node variants in stored order; action order is execution order.
        edges: Editor edges from the trigger to actions.
        description: Optional description.
        id: Store-assigned identifier, ``None`` until persisted.
        active: False once soft-deleted.
        created_at: Creation timestamp.
        updated_at: Timestamp of the last mutation.

    Example:
        >>> definition = WorkflowDefinition(
        ...     name="Notify on PDF",
        ...     owner_id="user-1",
        ...     nodes=[
        ...         TriggerNode(id="t", config={"triggerType": "file-upload", "fileTypes": ["*.pdf"]}),
        ...         EmailActionNode(id="e", config={"to": "pm@example.com"}),
        ...     ],
        ...     edges=[Edge(id="t-e", source="t", target="e")],
        ... )
        >>> definition.validate()
        []
    """

    name: str
    owner_id: str
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    description: str | None = None
    id: UUID | None = None
    active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        owner_id: str,
        **attrs: Any,
    ) -> WorkflowDefinition:
        """Build a definition from raw node and edge mappings.

        Args:
            data: Mapping with ``name``, ``description``, ``nodes`` and ``edges``.
            owner_id: Owner of the definition.
            **attrs: Extra attributes such as ``id`` or timestamps.

        Returns:
            The parsed definition.

        Raises:
            WorkflowValidationError: If any node cannot be parsed.
        """
        return cls(
            name=data.get("name") or "",
            owner_id=owner_id,
            description=data.get("description"),
            nodes=parse_nodes(data.get("nodes") or []),
            edges=[Edge.from_dict(edge) for edge in data.get("edges") or []],
            **attrs,
        )

    @property
    def trigger_node(self) -> TriggerNode | None:
        """The trigger node, or None if the definition is malformed."""
        for node in self.nodes:
            if isinstance(node, TriggerNode):
                return node
        return None

    @property
    def trigger_kind(self) -> str | None:
        trigger = self.trigger_node
        return trigger.trigger_kind if trigger else None

    @property
    def action_nodes(self) -> list[Node]:
        """Every non-trigger node in stored order."""
        return [node for node in self.nodes if node.kind != NodeKind.TRIGGER]

    def get_node(self, node_id: str) -> Node | None:
        return next((node for node in self.nodes if node.id == node_id), None)

    def validate(self) -> list[str]:
        """Validate the definition against its write-time invariants.

        Returns:
            List of validation error messages. Empty list if valid.
        """
        errors: list[str] = []

        if not self.name or not self.name.strip():
            errors.append("Workflow name is required")

        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                errors.append(f"Duplicate node id '{node.id}'")
            seen.add(node.id)

        triggers = [node for node in self.nodes if node.kind == NodeKind.TRIGGER]
        if len(triggers) != 1:
            errors.append(f"Exactly one trigger node is required, found {len(triggers)}")

        for i, edge in enumerate(self.edges):
            source = self.get_node(edge.source)
            target = self.get_node(edge.target)
            if source is None:
                errors.append(f"Edge {i}: source node '{edge.source}' not found")
            elif source.kind != NodeKind.TRIGGER:
                errors.append(f"Edge {i}: source node '{edge.source}' is not a trigger")
            if target is None:
                errors.append(f"Edge {i}: target node '{edge.target}' not found")
            elif target.kind == NodeKind.TRIGGER:
                errors.append(f"Edge {i}: target node '{edge.target}' is not an action")

        return errors

    def ensure_valid(self) -> None:
        """Raise if :meth:`validate` reports any error.

        Raises:
            WorkflowValidationError: If the definition is invalid.
        """
        errors = self.validate()
        if errors:
            raise WorkflowValidationError(errors)

    def nodes_to_json(self) -> list[dict[str, Any]]:
        return [node.to_dict() for node in self.nodes]

    def edges_to_json(self) -> list[dict[str, str]]:
        return [edge.to_dict() for edge in self.edges]


def parse_nodes(raw_nodes: Sequence[Mapping[str, Any]]) -> list[Node]:
    """Parse a sequence of raw node mappings, collecting every error.

    Raises:
        WorkflowValidationError: If one or more nodes cannot be parsed.
    """
    nodes: list[Node] = []
    errors: list[str] = []
    for raw in raw_nodes:
        try:
            nodes.append(node_from_dict(raw))
        except WorkflowValidationError as e:
            errors.extend(e.errors)
    if errors:
        raise WorkflowValidationError(errors)
    return nodes
