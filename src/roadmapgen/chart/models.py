"""Data models for the chart generator."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ChartConfig:
    """Settings for Gantt chart generation.

    Attributes:
        title: Chart title.
        date_format: Mermaid dateFormat for task start dates.
        axis_format: Mermaid axisFormat for the time axis.
        include_progress: Append a "%% Completed" / "%% In Progress" comment
            to finished and active tasks.
        group_by_epic: One section per epic instead of a single "Tasks" section.
        show_milestones: Add a trailing Milestones section.
        max_items: Maximum number of tasks; 0 means no limit.
        max_milestones: Maximum number of milestones.
        links: (label, url) pairs listed under the statistics.
    """

    title: str = "Project Roadmap"
    date_format: str = "YYYY-MM-DD"
    axis_format: str = "%b %d"
    include_progress: bool = False
    group_by_epic: bool = True
    show_milestones: bool = True
    max_items: int = 50
    max_milestones: int = 5
    links: tuple[tuple[str, str], ...] = ()


@dataclass
class MilestoneEntry:
    """A milestone marker on the chart."""

    title: str
    date: datetime


@dataclass
class Statistics:
    """Item counts shown under the chart.

    Attributes:
        total: All processed items.
        done: Items with status Done.
        in_progress: Items with status In Progress.
        todo: Items with status To Do.
        critical: Items with priority Critical.
        high: Items with priority High.
    """

    total: int
    done: int
    in_progress: int
    todo: int
    critical: int
    high: int

    @property
    def completion_percent(self) -> int:
        """Done share, rounded down; 0 for an empty board."""
        if self.total == 0:
            return 0
        return self.done * 100 // self.total
