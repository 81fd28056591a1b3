"""Data models for GitHub Projects v2 GraphQL responses.

Item content and field values are tagged unions keyed on the GraphQL
``__typename``. Timestamps are kept as the ISO-8601 strings GitHub returns;
the processor parses them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _nodes(connection: dict[str, Any] | None) -> list[dict[str, Any]]:
    """Return the non-null nodes of a GraphQL connection."""
    if not connection:
        return []
    return [node for node in connection.get("nodes") or [] if node]


@dataclass
class Milestone:
    """A repository milestone attached to an issue or set as a field value."""

    id: str
    title: str
    description: str | None = None
    due_on: str | None = None
    state: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> Milestone:
        return cls(
            id=node["id"],
            title=node["title"],
            description=node.get("description"),
            due_on=node.get("dueOn"),
            state=node.get("state"),
        )


# --- Field definitions ---------------------------------------------------


@dataclass
class FieldOption:
    """One option of a single-select field."""

    id: str
    name: str
    color: str | None = None


@dataclass
class Iteration:
    """One iteration window of an iteration field."""

    id: str
    title: str
    start_date: str
    duration: int


@dataclass
class FieldDefinition:
    """A project field definition.

    Attributes:
        id: Field node ID.
        name: Display name, e.g. "Status" or "Start Date".
        data_type: GitHub data type (TEXT, DATE, SINGLE_SELECT, ...).
        kind: "field", "single_select" or "iteration".
        options: Options for single-select fields.
        iterations: Iteration windows for iteration fields.
    """

    id: str
    name: str
    data_type: str | None = None
    kind: str = "field"
    options: list[FieldOption] = field(default_factory=list)
    iterations: list[Iteration] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> FieldDefinition:
        typename = node.get("__typename")
        options = [
            FieldOption(id=opt["id"], name=opt["name"], color=opt.get("color"))
            for opt in node.get("options") or []
        ]
        configuration = node.get("configuration") or {}
        iterations = [
            Iteration(
                id=it["id"],
                title=it["title"],
                start_date=it["startDate"],
                duration=int(it["duration"]),
            )
            for it in configuration.get("iterations") or []
        ]
        if typename == "ProjectV2SingleSelectField":
            kind = "single_select"
        elif typename == "ProjectV2IterationField":
            kind = "iteration"
        else:
            kind = "field"
        return cls(
            id=node["id"],
            name=node["name"],
            data_type=node.get("dataType"),
            kind=kind,
            options=options,
            iterations=iterations,
        )


@dataclass
class Project:
    """A Projects v2 board with its field definitions."""

    id: str
    title: str
    number: int | None = None
    description: str | None = None
    url: str | None = None
    fields: list[FieldDefinition] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> Project:
        # Field nodes for unsupported field types come back as empty objects
        fields = [
            FieldDefinition.from_node(f)
            for f in _nodes(node.get("fields"))
            if f.get("id")
        ]
        return cls(
            id=node["id"],
            title=node["title"],
            number=node.get("number"),
            description=node.get("shortDescription"),
            url=node.get("url"),
            fields=fields,
        )


@dataclass
class ProjectSummary:
    """Entry of an organization's project list."""

    id: str
    number: int
    title: str
    description: str | None = None
    url: str | None = None
    closed: bool = False
    visibility: str | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> ProjectSummary:
        return cls(
            id=node["id"],
            number=int(node["number"]),
            title=node["title"],
            description=node.get("shortDescription"),
            url=node.get("url"),
            closed=bool(node.get("closed", False)),
            visibility=node.get("visibility"),
        )


# --- Item content ----------------------------------------------------------


@dataclass
class IssueContent:
    """Issue backing a project item."""

    id: str
    title: str
    url: str
    state: str
    number: int
    created_at: str | None = None
    closed_at: str | None = None
    body: str = ""
    labels: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    milestone: Milestone | None = None


@dataclass
class PullRequestContent:
    """Pull request backing a project item."""

    id: str
    title: str
    url: str
    state: str
    number: int
    created_at: str | None = None
    closed_at: str | None = None
    merged_at: str | None = None
    body: str = ""
    labels: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)


@dataclass
class DraftIssueContent:
    """Draft note that lives only on the board."""

    id: str
    title: str
    body: str = ""
    assignees: list[str] = field(default_factory=list)


ItemContent = IssueContent | PullRequestContent | DraftIssueContent


def parse_content(node: dict[str, Any] | None) -> ItemContent | None:
    """Build the content variant for a GraphQL content node.

    Returns None for missing content and for content types the query does
    not select (those come back as an object holding only ``__typename``).

    Raises:
        KeyError: If a selected content node lacks a required attribute.
    """
    if not node:
        return None

    labels = [label["name"] for label in _nodes(node.get("labels"))]
    assignees = [user["login"] for user in _nodes(node.get("assignees"))]

    match node.get("__typename"):
        case "Issue":
            milestone = node.get("milestone")
            return IssueContent(
                id=node["id"],
                title=node["title"],
                url=node["url"],
                state=node["state"],
                number=int(node["number"]),
                created_at=node.get("createdAt"),
                closed_at=node.get("closedAt"),
                body=node.get("body") or "",
                labels=labels,
                assignees=assignees,
                milestone=Milestone.from_node(milestone) if milestone else None,
            )
        case "PullRequest":
            return PullRequestContent(
                id=node["id"],
                title=node["title"],
                url=node["url"],
                state=node["state"],
                number=int(node["number"]),
                created_at=node.get("createdAt"),
                closed_at=node.get("closedAt"),
                merged_at=node.get("mergedAt"),
                body=node.get("body") or "",
                labels=labels,
                assignees=assignees,
            )
        case "DraftIssue":
            return DraftIssueContent(
                id=node["id"],
                title=node["title"],
                body=node.get("body") or "",
                assignees=assignees,
            )
        case _:
            return None


# --- Field values ----------------------------------------------------------


@dataclass
class TextValue:
    field_id: str
    field_name: str
    text: str | None


@dataclass
class SingleSelectValue:
    field_id: str
    field_name: str
    name: str | None
    option_id: str | None = None


@dataclass
class DateValue:
    field_id: str
    field_name: str
    date: str | None


@dataclass
class NumberValue:
    field_id: str
    field_name: str
    number: float | None


@dataclass
class MilestoneValue:
    field_id: str
    field_name: str
    milestone: Milestone | None


@dataclass
class IterationValue:
    field_id: str
    field_name: str
    title: str | None
    start_date: str | None = None
    duration: int | None = None


FieldValue = (
    TextValue | SingleSelectValue | DateValue | NumberValue | MilestoneValue | IterationValue
)

_FIELD_VALUE_TYPES = frozenset(
    {
        "ProjectV2ItemFieldTextValue",
        "ProjectV2ItemFieldSingleSelectValue",
        "ProjectV2ItemFieldDateValue",
        "ProjectV2ItemFieldNumberValue",
        "ProjectV2ItemFieldMilestoneValue",
        "ProjectV2ItemFieldIterationValue",
    }
)


def parse_field_value(node: dict[str, Any]) -> FieldValue | None:
    """Build the field value variant for a GraphQL field value node.

    Returns None for value types the query does not select (labels, users,
    repository, ...).

    Raises:
        KeyError: If a selected value lacks its field reference.
    """
    typename = node.get("__typename")
    if typename not in _FIELD_VALUE_TYPES:
        return None

    field_ref = node["field"]
    field_id = field_ref["id"]
    field_name = field_ref.get("name") or ""

    match typename:
        case "ProjectV2ItemFieldTextValue":
            return TextValue(field_id, field_name, node.get("text"))
        case "ProjectV2ItemFieldSingleSelectValue":
            return SingleSelectValue(field_id, field_name, node.get("name"), node.get("optionId"))
        case "ProjectV2ItemFieldDateValue":
            return DateValue(field_id, field_name, node.get("date"))
        case "ProjectV2ItemFieldNumberValue":
            return NumberValue(field_id, field_name, node.get("number"))
        case "ProjectV2ItemFieldMilestoneValue":
            milestone = node.get("milestone")
            return MilestoneValue(
                field_id, field_name, Milestone.from_node(milestone) if milestone else None
            )
        case "ProjectV2ItemFieldIterationValue":
            duration = node.get("duration")
            return IterationValue(
                field_id,
                field_name,
                node.get("title"),
                node.get("startDate"),
                int(duration) if duration is not None else None,
            )
    return None


@dataclass
class ProjectItem:
    """One row of a Projects v2 board.

    Attributes:
        id: Project item node ID.
        type: GitHub item type (ISSUE, PULL_REQUEST, DRAFT_ISSUE, REDACTED).
        content: Backing issue, pull request or draft; None when redacted.
        field_values: Typed custom field values set on the item.
    """

    id: str
    type: str | None = None
    content: ItemContent | None = None
    field_values: list[FieldValue] = field(default_factory=list)

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> ProjectItem:
        values = []
        for value_node in _nodes(node.get("fieldValues")):
            value = parse_field_value(value_node)
            if value is not None:
                values.append(value)
        return cls(
            id=node["id"],
            type=node.get("type"),
            content=parse_content(node.get("content")),
            field_values=values,
        )
