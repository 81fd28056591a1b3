"""ChartGenerator - Renders processed items as a Mermaid Gantt chart."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime

from roadmapgen.chart.models import ChartConfig, MilestoneEntry, Statistics
from roadmapgen.processor.mappings import (
    DEFAULT_EPIC,
    PRIORITY_CRITICAL,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    STATUS_DONE,
    STATUS_IN_PROGRESS,
    STATUS_TODO,
)
from roadmapgen.processor.models import ProcessedItem

logger = logging.getLogger("roadmapgen.chart")

PRIORITY_RANK = {
    PRIORITY_CRITICAL: 0,
    PRIORITY_HIGH: 1,
    PRIORITY_MEDIUM: 2,
    PRIORITY_LOW: 3,
}
UNKNOWN_PRIORITY_RANK = 4

MAX_TITLE_LENGTH = 40
TRUNCATED_TITLE_LENGTH = 37
MAX_SLUG_LENGTH = 20

_TITLE_UNSAFE = re.compile(r'[:;\[\](){}",]')
_SECTION_UNSAFE = re.compile(r"[^\w\s-]", re.ASCII)
_SLUG_UNSAFE = re.compile(r"[^a-z0-9]")


def priority_rank(priority: str | None) -> int:
    return PRIORITY_RANK.get(priority or "", UNKNOWN_PRIORITY_RANK)


def sanitize_title(title: str) -> str:
    """Strip characters that break task lines and shorten long titles.

    Titles longer than 40 characters become 37 characters plus "...".
    """
    cleaned = " ".join(_TITLE_UNSAFE.sub("", title).split())
    if len(cleaned) > MAX_TITLE_LENGTH:
        cleaned = cleaned[:TRUNCATED_TITLE_LENGTH] + "..."
    return cleaned or "Untitled Task"


def sanitize_section_name(name: str) -> str:
    return _SECTION_UNSAFE.sub("", name).strip() or "Unnamed"


def slugify(title: str) -> str:
    slug = _SLUG_UNSAFE.sub("_", title.lower())
    slug = re.sub(r"_+", "_", slug).strip("_")
    return slug[:MAX_SLUG_LENGTH] or "untitled"


def task_id(title: str, number: int | None = None) -> str:
    """Mermaid task ID: task<number>, else task_<slug of the title>."""
    if number:
        return f"task{number}"
    return f"task_{slugify(sanitize_title(title))}"


def is_epic(item: ProcessedItem) -> bool:
    title = item.title.lower()
    if title.startswith(("epic:", "epic ")):
        return True
    return any(label.lower() == "epic" for label in item.labels)


class ChartGenerator:
    """Generates Mermaid Gantt syntax and statistics from ProcessedItems.

    Output depends only on the items and the config, so repeated runs over
    the same board produce identical charts.
    """

    def __init__(self, config: ChartConfig | None = None) -> None:
        """Initialize the Chart Generator.

        Args:
            config: Chart settings. Defaults to ChartConfig().
        """
        self.config = config or ChartConfig()

    def generate_gantt(self, items: Iterable[ProcessedItem]) -> str:
        """Generate the Gantt chart text.

        Args:
            items: Enriched items.

        Returns:
            Mermaid source starting with "gantt".
        """
        items = list(items)
        logger.info("Generating Gantt chart from %d item(s)", len(items))

        selected = self.filter_and_sort(items)
        if self.config.group_by_epic:
            sections = self.group_by_epic(selected)
        else:
            sections = {"Tasks": selected}

        chart = self._header()
        first = True
        for name, section_items in sections.items():
            if not section_items:
                continue
            if not first:
                chart += "\n"
            chart += self.render_section(name, section_items)
            first = False

        if self.config.show_milestones:
            chart += "\n" + self.render_milestones(selected)

        logger.info("Generated Gantt chart with %d section(s)", len(sections))
        return chart

    def filter_and_sort(self, items: list[ProcessedItem]) -> list[ProcessedItem]:
        """Select the items to chart, ordered by priority then start date.

        Epics are preferred; when the board has none every dated item is
        charted. The result is capped at max_items.
        """
        valid = [item for item in items if item.title and item.start_date and item.due_date]
        epics = [item for item in valid if is_epic(item)]
        selected = epics or valid

        selected = sorted(
            selected, key=lambda item: (priority_rank(item.priority), item.start_date)
        )
        if self.config.max_items:
            selected = selected[: self.config.max_items]

        logger.debug("Filtered to %d item(s) from %d", len(selected), len(items))
        return selected

    def group_by_epic(self, items: list[ProcessedItem]) -> dict[str, list[ProcessedItem]]:
        """Group items by epic, most urgent group first."""
        groups: dict[str, list[ProcessedItem]] = {}
        for item in items:
            groups.setdefault(item.epic or DEFAULT_EPIC, []).append(item)

        ordered = sorted(
            groups,
            key=lambda epic: min(priority_rank(item.priority) for item in groups[epic]),
        )
        return {epic: groups[epic] for epic in ordered}

    def render_section(self, name: str, items: list[ProcessedItem]) -> str:
        section = f"section {sanitize_section_name(name)}\n"
        for item in items:
            section += self.render_task(item) + "\n"
        return section

    def render_task(self, item: ProcessedItem) -> str:
        """Render one task line.

        Shape: ``<name> :[<tag>, ...]<id>, <start>, <N>d``. The colon after
        the name is always present.
        """
        if item.start_date is None:
            raise ValueError(f"Item {item.id} has no start date")

        fields = [*self.task_tags(item), task_id(item.title, item.number)]
        fields.append(item.start_date.strftime("%Y-%m-%d"))
        fields.append(f"{max(1, item.duration_days)}d")
        line = f"{sanitize_title(item.title)} :{', '.join(fields)}"

        if self.config.include_progress:
            if item.status == STATUS_DONE:
                line += " %% Completed"
            elif item.status == STATUS_IN_PROGRESS:
                line += " %% In Progress"
        return line

    @staticmethod
    def task_tags(item: ProcessedItem) -> list[str]:
        tags = []
        if item.priority == PRIORITY_CRITICAL:
            tags.append("crit")
        if item.status == STATUS_DONE:
            tags.append("done")
        elif item.status == STATUS_IN_PROGRESS:
            tags.append("active")
        return tags

    def collect_milestones(self, items: list[ProcessedItem]) -> list[MilestoneEntry]:
        """Collect unique milestones in date order, capped at max_milestones.

        Sources: repository milestones with due dates, project milestone
        values with due dates, and finished critical items.
        """
        candidates: list[MilestoneEntry] = []
        for item in items:
            if item.milestone and item.milestone.due_date:
                candidates.append(MilestoneEntry(item.milestone.title, item.milestone.due_date))
            if item.project_milestone and item.project_milestone.due_date:
                candidates.append(
                    MilestoneEntry(item.project_milestone.title, item.project_milestone.due_date)
                )
            if item.status == STATUS_DONE and item.priority == PRIORITY_CRITICAL and item.due_date:
                candidates.append(
                    MilestoneEntry(f"{item.title} Complete", item.closed_at or item.due_date)
                )

        seen: set[tuple[str, str]] = set()
        unique = []
        for milestone in candidates:
            key = (milestone.title, milestone.date.strftime("%Y-%m-%d"))
            if key in seen:
                continue
            seen.add(key)
            unique.append(milestone)

        unique.sort(key=lambda milestone: milestone.date)
        return unique[: self.config.max_milestones]

    def render_milestones(self, items: list[ProcessedItem]) -> str:
        milestones = self.collect_milestones(items)
        if not milestones:
            return ""

        section = "section Milestones\n"
        for milestone in milestones:
            section += (
                f"{sanitize_title(milestone.title)} :milestone, {task_id(milestone.title)}, "
                f"{milestone.date.strftime('%Y-%m-%d')}, 0d\n"
            )
        return section

    def generate_statistics(self, items: Iterable[ProcessedItem]) -> Statistics:
        """Count items by status and priority."""
        items = list(items)
        return Statistics(
            total=len(items),
            done=sum(1 for item in items if item.status == STATUS_DONE),
            in_progress=sum(1 for item in items if item.status == STATUS_IN_PROGRESS),
            todo=sum(1 for item in items if item.status == STATUS_TODO),
            critical=sum(1 for item in items if item.priority == PRIORITY_CRITICAL),
            high=sum(1 for item in items if item.priority == PRIORITY_HIGH),
        )

    def render_statistics(self, stats: Statistics, now: datetime) -> str:
        """Render statistics as Markdown.

        The last line carries the generation time.
        """
        lines = [
            "## Project Statistics",
            "",
            f"- **Total Items:** {stats.total}",
            f"- **Completed:** {stats.done} ({stats.completion_percent}%)",
            f"- **In Progress:** {stats.in_progress}",
            f"- **To Do:** {stats.todo}",
            f"- **Critical Priority:** {stats.critical}",
            f"- **High Priority:** {stats.high}",
            "",
        ]
        if self.config.links:
            lines.append("### Quick Links")
            lines.extend(f"- [{label}]({url})" for label, url in self.config.links)
            lines.append("")
        lines.append(f"*Last updated: {now.strftime('%b %d, %Y')} at {now.strftime('%H:%M')} UTC*")
        return "\n".join(lines)

    def _header(self) -> str:
        title = " ".join(self.config.title.split()) or "Project Roadmap"
        return (
            "gantt\n"
            f"    title {title}\n"
            f"    dateFormat {self.config.date_format}\n"
            f"    axisFormat {self.config.axis_format}\n"
            "    todayMarker stroke-width:5px,stroke:#0f0,opacity:0.75\n"
            "\n"
        )
