"""Builders for GraphQL nodes and processed items shared by the tests."""

from datetime import datetime, timezone
from typing import Any

from roadmapgen.processor import ItemType, ProcessedItem

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_item(**overrides: Any) -> ProcessedItem:
    """Build an enriched ProcessedItem with sensible defaults."""
    values: dict[str, Any] = {
        "id": "PVTI_1",
        "title": "Build login page",
        "url": "https://github.com/acme/web/issues/1",
        "state": "OPEN",
        "type": ItemType.ISSUE,
        "number": 1,
        "epic": "Frontend",
        "priority": "Medium",
        "status": "To Do",
        "start_date": NOW,
        "due_date": datetime(2025, 3, 17, 12, 0, tzinfo=timezone.utc),
        "duration_days": 7,
    }
    values.update(overrides)
    return ProcessedItem(**values)


def issue_node(
    number: int = 1,
    title: str = "Build login page",
    state: str = "OPEN",
    labels: list[str] | None = None,
    field_values: list[dict[str, Any]] | None = None,
    created_at: str | None = "2025-03-01T09:00:00Z",
    milestone: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a GraphQL project item node backed by an issue."""
    return {
        "id": f"PVTI_{number}",
        "type": "ISSUE",
        "fieldValues": {"nodes": field_values or []},
        "content": {
            "__typename": "Issue",
            "id": f"I_{number}",
            "title": title,
            "url": f"https://github.com/acme/web/issues/{number}",
            "state": state,
            "createdAt": created_at,
            "closedAt": None,
            "number": number,
            "body": "",
            "assignees": {"nodes": [{"login": "octocat"}]},
            "labels": {"nodes": [{"name": name} for name in labels or []]},
            "milestone": milestone,
        },
    }


def date_value(field_id: str, field_name: str, date: str) -> dict[str, Any]:
    """Build a GraphQL date field value node."""
    return {
        "__typename": "ProjectV2ItemFieldDateValue",
        "field": {"id": field_id, "name": field_name},
        "date": date,
    }


def select_value(field_id: str, field_name: str, name: str) -> dict[str, Any]:
    """Build a GraphQL single-select field value node."""
    return {
        "__typename": "ProjectV2ItemFieldSingleSelectValue",
        "field": {"id": field_id, "name": field_name},
        "name": name,
        "optionId": f"opt_{name.lower().replace(' ', '_')}",
    }


PROJECT_NODE: dict[str, Any] = {
    "id": "PVT_1",
    "number": 1,
    "title": "Acme Roadmap",
    "shortDescription": "Everything we ship",
    "url": "https://github.com/orgs/acme/projects/1",
    "fields": {
        "nodes": [
            {
                "__typename": "ProjectV2Field",
                "id": "F_title",
                "name": "Title",
                "dataType": "TITLE",
            },
            {
                "__typename": "ProjectV2SingleSelectField",
                "id": "F_status",
                "name": "Status",
                "dataType": "SINGLE_SELECT",
                "options": [
                    {"id": "opt_todo", "name": "To Do", "color": "GRAY"},
                    {"id": "opt_done", "name": "Done", "color": "GREEN"},
                ],
            },
            {
                "__typename": "ProjectV2Field",
                "id": "F_start",
                "name": "Start Date",
                "dataType": "DATE",
            },
            {
                "__typename": "ProjectV2Field",
                "id": "F_due",
                "name": "Due Date",
                "dataType": "DATE",
            },
            {
                "__typename": "ProjectV2IterationField",
                "id": "F_sprint",
                "name": "Sprint",
                "dataType": "ITERATION",
                "configuration": {
                    "iterations": [
                        {
                            "id": "it_1",
                            "title": "Sprint 1",
                            "startDate": "2025-03-03",
                            "duration": 14,
                        }
                    ]
                },
            },
            {},
        ]
    },
}
