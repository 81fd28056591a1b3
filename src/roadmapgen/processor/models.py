"""Data models for the data processor."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ItemType(str, Enum):
    """Kind of content backing a board item."""

    ISSUE = "issue"
    PULL_REQUEST = "pull-request"
    DRAFT = "draft"


@dataclass
class MilestoneRef:
    """Milestone attached to an item.

    Attributes:
        title: Milestone title.
        due_date: Due date, if the milestone has one.
        state: OPEN or CLOSED.
        description: Milestone description (project milestone values only).
    """

    title: str
    due_date: datetime | None = None
    state: str | None = None
    description: str | None = None


@dataclass
class IterationRef:
    """Iteration (sprint) an item is planned into."""

    title: str | None
    start_date: datetime | None = None
    duration: int | None = None


@dataclass
class ProcessedItem:
    """Flattened, canonical view of a board item used for rendering.

    Attributes:
        id: Project item node ID.
        title: Issue, pull request or draft title.
        url: Content URL (empty for drafts).
        state: Content state (OPEN, CLOSED, MERGED, ...).
        type: Kind of content.
        number: Issue or pull request number.
        labels: Label names.
        assignees: Assignee logins.
        epic: Epic name; "Other" when nothing can be inferred.
        priority: Critical, High, Medium or Low after enrichment.
        status: To Do, In Progress, In Review or Done after enrichment.
        start_date: Start date; creation date or now when not set.
        due_date: Due date; estimated from priority or story points when not set.
        due_date_estimated: Whether due_date was synthesized.
        duration_days: Whole days between start and due, at least 1.
        created_at: Content creation time.
        closed_at: Content close time.
        milestone: Repository milestone of an issue.
        project_milestone: Milestone set through a project field.
        iteration: Iteration field value.
        estimation: Story points or other numeric estimate.
        sprint: Sprint name from a text or single-select field.
        custom_fields: Values of project fields with no canonical mapping.
    """

    id: str
    title: str
    url: str
    state: str
    type: ItemType
    number: int | None = None
    labels: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    epic: str | None = None
    priority: str | None = None
    status: str | None = None
    start_date: datetime | None = None
    due_date: datetime | None = None
    due_date_estimated: bool = False
    duration_days: int = 0
    created_at: datetime | None = None
    closed_at: datetime | None = None
    milestone: MilestoneRef | None = None
    project_milestone: MilestoneRef | None = None
    iteration: IterationRef | None = None
    estimation: float | None = None
    sprint: str | None = None
    custom_fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class DataQuality:
    """How much of the board carried explicit planning data.

    Attributes:
        total: Number of processed items.
        with_dates: Items whose due date was set on the board.
        with_epic: Items with an epic other than the fallback.
        with_priority: Items with a priority.
        with_status: Items with a status.
        estimated_dates: Items whose due date was estimated.
    """

    total: int
    with_dates: int
    with_epic: int
    with_priority: int
    with_status: int
    estimated_dates: int

    def percent(self, count: int) -> int:
        """Share of items as a whole percentage."""
        if self.total == 0:
            return 0
        return round(count / self.total * 100)
