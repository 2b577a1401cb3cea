"""Tests for trigger condition matching."""

from __future__ import annotations

import pytest

from acc_workflows.core.events import TriggerEvent
from acc_workflows.engine.matcher import file_extension, matches, normalize_file_types


@pytest.mark.unit
class TestFileExtension:
    """Tests for file_extension."""

    @pytest.mark.parametrize(
        ("filename", "expected"),
        [
            ("plan.PDF", "pdf"),
            ("archive.tar.gz", "gz"),
            ("README", "readme"),
            ("", ""),
        ],
    )
    def test_extension(self, filename: str, expected: str) -> None:
        assert file_extension(filename) == expected


@pytest.mark.unit
class TestNormalizeFileTypes:
    """Tests for normalize_file_types."""

    def test_patterns_and_bare_extensions(self) -> None:
        assert normalize_file_types(["*.PDF", "dwg", " *.rvt "]) == ["pdf", "dwg", "rvt"]

    def test_comma_separated_string(self) -> None:
        assert normalize_file_types("*.pdf, *.dwg") == ["pdf", "dwg"]

    @pytest.mark.parametrize("raw", [None, "", [], ["*"], "*", [" ", ""]])
    def test_wildcards(self, raw: object) -> None:
        assert normalize_file_types(raw) == []


@pytest.mark.unit
class TestMatches:
    """Tests for matches."""

    @pytest.fixture
    def event(self) -> TriggerEvent:
        return TriggerEvent.file_upload(filename="Level1.PDF", projectId="p-1", folderId="f-1")

    def test_empty_config_matches_everything(self, event: TriggerEvent) -> None:
        assert matches({}, event)

    def test_empty_strings_are_wildcards(self, event: TriggerEvent) -> None:
        assert matches({"projectId": "", "folderId": "", "fileTypes": []}, event)

    def test_project_filter(self, event: TriggerEvent) -> None:
        assert matches({"projectId": "p-1"}, event)
        assert not matches({"projectId": "p-2"}, event)

    def test_folder_filter(self, event: TriggerEvent) -> None:
        assert matches({"folderId": "f-1"}, event)
        assert not matches({"folderId": "f-2"}, event)

    def test_file_type_filter_is_case_insensitive(self, event: TriggerEvent) -> None:
        assert matches({"fileTypes": ["*.pdf"]}, event)
        assert not matches({"fileTypes": ["*.dwg"]}, event)

    def test_star_matches_any_file(self, event: TriggerEvent) -> None:
        assert matches({"fileTypes": ["*"]}, event)

    def test_every_filter_must_hold(self, event: TriggerEvent) -> None:
        assert matches({"projectId": "p-1", "folderId": "f-1", "fileTypes": ["pdf"]}, event)
        assert not matches({"projectId": "p-1", "folderId": "f-1", "fileTypes": ["dwg"]}, event)

    def test_event_missing_field(self) -> None:
        event = TriggerEvent.file_upload(filename="plan.pdf")

        assert not matches({"projectId": "p-1"}, event)

    def test_filename_without_extension(self) -> None:
        event = TriggerEvent.file_upload(filename="pdf")

        assert matches({"fileTypes": ["pdf"]}, event)
