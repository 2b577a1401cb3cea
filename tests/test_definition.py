"""Tests for workflow definitions, node variants and edges."""

from __future__ import annotations

import pytest

from acc_workflows.core.definition import (
    CalendarActionNode,
    Edge,
    EmailActionNode,
    TriggerNode,
    WorkflowDefinition,
    node_from_dict,
    parse_nodes,
)
from acc_workflows.exceptions import WorkflowValidationError
from tests.conftest import make_definition


@pytest.mark.unit
class TestNodeParsing:
    """Tests for building node variants from raw mappings."""

    def test_stored_shape(self) -> None:
        node = node_from_dict({"id": "e1", "kind": "email-action", "config": {"to": "a@example.com"}})

        assert isinstance(node, EmailActionNode)
        assert node.id == "e1"
        assert node.config["to"] == "a@example.com"

    def test_editor_shape(self) -> None:
        """The graph editor nests config under data and uses legacy type names."""
        node = node_from_dict(
            {
                "id": "t1",
                "type": "acc-trigger",
                "position": {"x": 10.0, "y": 20.0},
                "data": {"label": "On upload", "config": {"triggerType": "file-upload", "projectId": "p-1"}},
            }
        )

        assert isinstance(node, TriggerNode)
        assert node.label == "On upload"
        assert node.position == {"x": 10.0, "y": 20.0}
        assert node.trigger_kind == "file-upload"
        assert node.config["projectId"] == "p-1"

    def test_unknown_kind(self) -> None:
        with pytest.raises(WorkflowValidationError, match="unsupported kind 'sms-action'"):
            node_from_dict({"id": "x", "kind": "sms-action"})

    def test_missing_id(self) -> None:
        with pytest.raises(WorkflowValidationError, match="missing an id"):
            node_from_dict({"kind": "trigger"})

    def test_parse_nodes_collects_every_error(self) -> None:
        with pytest.raises(WorkflowValidationError) as exc_info:
            parse_nodes([{"id": "a", "kind": "bogus"}, {"kind": "trigger"}])

        assert len(exc_info.value.errors) == 2

    def test_config_is_read_only(self) -> None:
        node = TriggerNode(id="t", config={"triggerType": "file-upload"})

        with pytest.raises(TypeError):
            node.config["triggerType"] = "other"  # type: ignore[index]

    def test_round_trip_to_dict(self) -> None:
        raw = {"id": "c", "kind": "calendar-action", "position": None, "label": None, "config": {"duration": 30}}

        assert node_from_dict(raw).to_dict() == raw


@pytest.mark.unit
class TestNodeConfig:
    """Tests for node configuration accessors and defaults."""

    def test_empty_string_is_absent(self) -> None:
        node = EmailActionNode(id="e", config={"subject": "", "cc": ""})

        assert node.subject_template == "File uploaded: {{filename}}"
        assert node.recipients == {"to": None, "cc": None, "bcc": None}

    def test_email_defaults(self) -> None:
        node = EmailActionNode(id="e")

        assert node.subject_template == "File uploaded: {{filename}}"
        assert node.body_template == "A new file has been uploaded"

    def test_calendar_title_alias(self) -> None:
        node = CalendarActionNode(id="c", config={"title": "Review {{filename}}"})

        assert node.summary_template == "Review {{filename}}"

    def test_calendar_defaults(self) -> None:
        node = CalendarActionNode(id="c")

        assert node.summary_template == "File Review: {{filename}}"
        assert node.description_template == "Review meeting for the newly uploaded file"
        assert node.duration_minutes == 60
        assert node.start_time is None
        assert node.attendees == []

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("45", 45),
            (90, 90),
            ("45min", 45),
            ("30.5", 30),
            (30.5, 30),
            (" 20 ", 20),
            ("abc", 60),
            ("", 60),
            (None, 60),
        ],
    )
    def test_duration(self, raw: object, expected: int) -> None:
        assert CalendarActionNode(id="c", config={"duration": raw}).duration_minutes == expected

    def test_attendees_from_string(self) -> None:
        node = CalendarActionNode(id="c", config={"attendees": " a@example.com, ,b@example.com "})

        assert node.attendees == ["a@example.com", "b@example.com"]

    def test_attendees_from_list(self) -> None:
        node = CalendarActionNode(id="c", config={"attendees": ["a@example.com", ""]})

        assert node.attendees == ["a@example.com"]


@pytest.mark.unit
class TestWorkflowDefinition:
    """Tests for WorkflowDefinition structure and validation."""

    def test_from_dict(self) -> None:
        definition = make_definition()

        assert definition.owner_id == "user-1"
        assert definition.trigger_kind == "file-upload"
        assert [node.id for node in definition.action_nodes] == ["email"]
        assert definition.edges == [Edge(id="trigger-email", source="trigger", target="email")]
        assert definition.validate() == []

    def test_action_nodes_keep_stored_order(self) -> None:
        definition = make_definition(
            actions=[
                {"id": "cal", "kind": "calendar-action", "config": {}},
                {"id": "mail", "kind": "email-action", "config": {}},
            ]
        )

        assert [node.id for node in definition.action_nodes] == ["cal", "mail"]

    def test_name_required(self) -> None:
        definition = make_definition(name="  ")

        assert "Workflow name is required" in definition.validate()

    def test_exactly_one_trigger(self) -> None:
        definition = WorkflowDefinition(
            name="No trigger",
            owner_id="user-1",
            nodes=[EmailActionNode(id="e")],
        )

        assert definition.trigger_node is None
        assert "Exactly one trigger node is required, found 0" in definition.validate()

    def test_two_triggers(self) -> None:
        definition = WorkflowDefinition(
            name="Two triggers",
            owner_id="user-1",
            nodes=[TriggerNode(id="t1"), TriggerNode(id="t2")],
        )

        assert "Exactly one trigger node is required, found 2" in definition.validate()

    def test_duplicate_node_ids(self) -> None:
        definition = WorkflowDefinition(
            name="Dupes",
            owner_id="user-1",
            nodes=[TriggerNode(id="t"), EmailActionNode(id="e"), CalendarActionNode(id="e")],
        )

        assert "Duplicate node id 'e'" in definition.validate()

    def test_edges_must_run_from_trigger_to_action(self) -> None:
        definition = WorkflowDefinition(
            name="Bad edges",
            owner_id="user-1",
            nodes=[TriggerNode(id="t"), EmailActionNode(id="e")],
            edges=[Edge(id="1", source="e", target="t"), Edge(id="2", source="t", target="missing")],
        )

        errors = definition.validate()

        assert "Edge 0: source node 'e' is not a trigger" in errors
        assert "Edge 0: target node 't' is not an action" in errors
        assert "Edge 1: target node 'missing' not found" in errors

    def test_ensure_valid_raises(self) -> None:
        definition = WorkflowDefinition(name="", owner_id="user-1")

        with pytest.raises(WorkflowValidationError) as exc_info:
            definition.ensure_valid()

        assert "Workflow name is required" in exc_info.value.errors

    def test_edge_default_id(self) -> None:
        assert Edge.from_dict({"source": "t", "target": "e"}).id == "t-e"

    def test_json_round_trip(self) -> None:
        definition = make_definition()
        restored = WorkflowDefinition.from_dict(
            {"name": definition.name, "nodes": definition.nodes_to_json(), "edges": definition.edges_to_json()},
            owner_id=definition.owner_id,
        )

        assert restored.nodes == definition.nodes
        assert restored.edges == definition.edges
