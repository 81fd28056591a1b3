"""Unit tests for GitHub response models."""

import pytest

from roadmapgen.github import (
    DraftIssueContent,
    IterationValue,
    MilestoneValue,
    NumberValue,
    PullRequestContent,
    TextValue,
)
from roadmapgen.github.models import parse_content, parse_field_value


def _field(name: str) -> dict:
    return {"id": f"F_{name.lower()}", "name": name}


@pytest.mark.unit
class TestParseContent:
    """Tests for parse_content."""

    def test_pull_request(self) -> None:
        content = parse_content(
            {
                "__typename": "PullRequest",
                "id": "PR_1",
                "title": "Add caching",
                "url": "https://github.com/acme/api/pull/5",
                "state": "MERGED",
                "number": 5,
                "mergedAt": "2025-02-01T10:00:00Z",
                "labels": {"nodes": [{"name": "backend"}, None]},
                "assignees": {"nodes": []},
            }
        )

        assert isinstance(content, PullRequestContent)
        assert content.merged_at == "2025-02-01T10:00:00Z"
        assert content.labels == ["backend"]

    def test_draft_issue(self) -> None:
        content = parse_content({"__typename": "DraftIssue", "id": "DI_1", "title": "Idea"})

        assert isinstance(content, DraftIssueContent)
        assert content.body == ""

    def test_missing_content(self) -> None:
        assert parse_content(None) is None


@pytest.mark.unit
class TestParseFieldValue:
    """Tests for parse_field_value."""

    def test_text_value(self) -> None:
        value = parse_field_value(
            {"__typename": "ProjectV2ItemFieldTextValue", "field": _field("Epic"), "text": "Auth"}
        )

        assert value == TextValue("F_epic", "Epic", "Auth")

    def test_number_value(self) -> None:
        value = parse_field_value(
            {"__typename": "ProjectV2ItemFieldNumberValue", "field": _field("Points"), "number": 3}
        )

        assert isinstance(value, NumberValue)
        assert value.number == 3

    def test_milestone_value(self) -> None:
        value = parse_field_value(
            {
                "__typename": "ProjectV2ItemFieldMilestoneValue",
                "field": _field("Milestone"),
                "milestone": {"id": "M_1", "title": "v1.0", "dueOn": "2025-06-30T00:00:00Z"},
            }
        )

        assert isinstance(value, MilestoneValue)
        assert value.milestone is not None
        assert value.milestone.due_on == "2025-06-30T00:00:00Z"

    def test_iteration_value(self) -> None:
        value = parse_field_value(
            {
                "__typename": "ProjectV2ItemFieldIterationValue",
                "field": _field("Sprint"),
                "title": "Sprint 4",
                "startDate": "2025-03-03",
                "duration": "14",
            }
        )

        assert isinstance(value, IterationValue)
        assert value.duration == 14

    def test_unselected_value_type(self) -> None:
        assert parse_field_value({"__typename": "ProjectV2ItemFieldUserValue"}) is None

    def test_selected_value_without_field_raises(self) -> None:
        with pytest.raises(KeyError):
            parse_field_value({"__typename": "ProjectV2ItemFieldTextValue", "text": "x"})
