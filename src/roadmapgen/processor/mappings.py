"""Field mapping and inference tables for the data processor.

The tables are frozen and passed to ``DataProcessor`` explicitly; tests and
the YAML config build alternates with ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass

CANONICAL_ATTRIBUTES = (
    "epic",
    "priority",
    "status",
    "start_date",
    "due_date",
    "estimation",
    "sprint",
)

PRIORITY_CRITICAL = "Critical"
PRIORITY_HIGH = "High"
PRIORITY_MEDIUM = "Medium"
PRIORITY_LOW = "Low"

STATUS_TODO = "To Do"
STATUS_IN_PROGRESS = "In Progress"
STATUS_IN_REVIEW = "In Review"
STATUS_DONE = "Done"

DEFAULT_EPIC = "Other"


@dataclass(frozen=True)
class FieldMappings:
    """Immutable lookup tables used while mapping and enriching items.

    Attributes:
        field_names: (canonical attribute, name variants) pairs. A project
            field maps to the first attribute with a variant contained in
            its name, compared case-insensitively.
        priority_keywords: (label, priority) pairs. The first pair whose
            label matches one of the item's labels exactly wins.
        epic_prefixes: Label prefixes naming an epic, e.g. "epic: Auth".
        epic_markers: Label substrings naming an epic, e.g. "area: api".
        epic_keywords: Substrings that make a whole label an epic name.
        priority_days: Estimated duration in days by lowercase priority.
        default_days: Estimated duration for other priorities.
        days_per_point: Days per story point when an estimation is set.
    """

    field_names: tuple[tuple[str, tuple[str, ...]], ...]
    priority_keywords: tuple[tuple[str, str], ...]
    epic_prefixes: tuple[str, ...] = ("epic:", "feature:")
    epic_markers: tuple[str, ...] = ("area:",)
    epic_keywords: tuple[str, ...] = (
        "frontend",
        "backend",
        "api",
        "ui",
        "infrastructure",
        "docs",
        "security",
    )
    priority_days: tuple[tuple[str, int], ...] = (
        ("critical", 3),
        ("high", 5),
        ("low", 14),
    )
    default_days: int = 7
    days_per_point: float = 1.5

    def match_field(self, field_name: str) -> str | None:
        """Return the canonical attribute a project field maps to, if any."""
        lowered = field_name.lower()
        for attribute, variants in self.field_names:
            if any(variant.lower() in lowered for variant in variants):
                return attribute
        return None

    def days_for_priority(self, priority: str | None) -> int:
        """Return the estimated duration for a priority."""
        lowered = (priority or "").lower()
        for name, days in self.priority_days:
            if name == lowered:
                return days
        return self.default_days


DEFAULT_MAPPINGS = FieldMappings(
    field_names=(
        ("epic", ("Epic", "Epic/Theme", "Feature Area")),
        ("priority", ("Priority", "Urgency", "Importance")),
        ("status", ("Status", "State", "Progress")),
        ("start_date", ("Start Date", "startDate", "Started")),
        ("due_date", ("Due Date", "dueDate", "Target Date", "End Date")),
        ("estimation", ("Story Points", "Points", "Estimation", "Effort", "Size")),
        ("sprint", ("Sprint", "Iteration", "Milestone")),
    ),
    priority_keywords=(
        ("priority: critical", PRIORITY_CRITICAL),
        ("critical", PRIORITY_CRITICAL),
        ("p0", PRIORITY_CRITICAL),
        ("priority: high", PRIORITY_HIGH),
        ("high priority", PRIORITY_HIGH),
        ("urgent", PRIORITY_HIGH),
        ("p1", PRIORITY_HIGH),
        ("priority: medium", PRIORITY_MEDIUM),
        ("p2", PRIORITY_MEDIUM),
        ("priority: low", PRIORITY_LOW),
        ("p3", PRIORITY_LOW),
    ),
)
