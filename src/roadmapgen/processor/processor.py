"""DataProcessor - Flattens project items into ProcessedItems."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from typing import Any, assert_never

from roadmapgen.github.models import (
    DateValue,
    DraftIssueContent,
    FieldDefinition,
    FieldValue,
    IssueContent,
    IterationValue,
    MilestoneValue,
    NumberValue,
    ProjectItem,
    PullRequestContent,
    SingleSelectValue,
    TextValue,
)
from roadmapgen.processor.mappings import (
    DEFAULT_EPIC,
    DEFAULT_MAPPINGS,
    PRIORITY_MEDIUM,
    STATUS_DONE,
    STATUS_IN_PROGRESS,
    STATUS_IN_REVIEW,
    STATUS_TODO,
    FieldMappings,
)
from roadmapgen.processor.models import (
    DataQuality,
    ItemType,
    IterationRef,
    MilestoneRef,
    ProcessedItem,
)

logger = logging.getLogger("roadmapgen.processor")

DEFAULT_DURATION_DAYS = 7

_DATE_ATTRIBUTES = ("start_date", "due_date")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: str | None) -> datetime | None:
    """Parse a GitHub date or timestamp into an aware UTC datetime.

    Raises:
        ValueError: If the value is not ISO-8601.
    """
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def compute_duration(start: datetime | None, due: datetime | None) -> int:
    """Whole days from start to due, rounded up, never below 1."""
    if start is None or due is None:
        return DEFAULT_DURATION_DAYS
    days = math.ceil((due - start).total_seconds() / 86400)
    return max(1, days)


def infer_status(state: str, item_type: ItemType) -> str:
    """Derive a board status from the issue or pull request state."""
    if state in ("CLOSED", "MERGED"):
        return STATUS_DONE
    if state == "OPEN":
        return STATUS_IN_REVIEW if item_type == ItemType.PULL_REQUEST else STATUS_IN_PROGRESS
    if state == "DRAFT":
        return STATUS_IN_PROGRESS
    return STATUS_TODO


class DataProcessor:
    """Converts raw project items into enriched ProcessedItems.

    Custom fields are mapped onto canonical attributes through a
    FieldMappings table; anything missing afterwards is inferred from
    labels and state, and dates are estimated.
    """

    def __init__(
        self,
        mappings: FieldMappings = DEFAULT_MAPPINGS,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the Data Processor.

        Args:
            mappings: Field mapping and inference tables.
            now: Clock used for default start dates.
        """
        self.mappings = mappings
        self.now = now

    def process_items(
        self, raw_items: Iterable[ProjectItem], fields: Iterable[FieldDefinition]
    ) -> list[ProcessedItem]:
        """Map and enrich a batch of project items.

        Items without content are skipped. An item that fails to map is
        logged and excluded; the rest of the batch continues.

        Args:
            raw_items: Items as returned by the GitHub client.
            fields: The project's field definitions.

        Returns:
            Enriched items in board order.
        """
        raw_items = list(raw_items)
        logger.info("Processing %d item(s)", len(raw_items))

        field_names = {definition.id: definition.name for definition in fields}
        logger.debug("Created field map with %d field(s)", len(field_names))

        processed = []
        for item in raw_items:
            if item.content is None:
                logger.warning("Skipping item without content: %s", item.id)
                continue
            try:
                processed.append(self.process_item(item, field_names))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.error("Error processing item %s: %s", item.id, e)

        logger.info("Processed %d item(s) successfully", len(processed))
        return self.enrich(processed)

    def process_item(self, item: ProjectItem, field_names: dict[str, str]) -> ProcessedItem:
        """Map one item's content and field values.

        Args:
            item: Project item with content.
            field_names: Field ID to field name lookup.

        Returns:
            The mapped, not yet enriched item.

        Raises:
            ValueError: If a timestamp on the content is malformed.
        """
        processed = self._from_content(item)
        for value in item.field_values:
            field_name = field_names.get(value.field_id) or value.field_name
            if not field_name:
                continue
            self._apply_field_value(processed, field_name, value)
        return processed

    def _from_content(self, item: ProjectItem) -> ProcessedItem:
        content = item.content
        match content:
            case IssueContent():
                processed = ProcessedItem(
                    id=item.id,
                    title=content.title,
                    url=content.url,
                    state=content.state,
                    type=ItemType.ISSUE,
                    number=content.number,
                    labels=list(content.labels),
                    assignees=list(content.assignees),
                    created_at=parse_datetime(content.created_at),
                    closed_at=parse_datetime(content.closed_at),
                )
                if content.milestone is not None:
                    processed.milestone = MilestoneRef(
                        title=content.milestone.title,
                        due_date=parse_datetime(content.milestone.due_on),
                        state=content.milestone.state,
                    )
                return processed
            case PullRequestContent():
                return ProcessedItem(
                    id=item.id,
                    title=content.title,
                    url=content.url,
                    state=content.state,
                    type=ItemType.PULL_REQUEST,
                    number=content.number,
                    labels=list(content.labels),
                    assignees=list(content.assignees),
                    created_at=parse_datetime(content.created_at),
                    closed_at=parse_datetime(content.merged_at or content.closed_at),
                )
            case DraftIssueContent():
                return ProcessedItem(
                    id=item.id,
                    title=content.title,
                    url="",
                    state="",
                    type=ItemType.DRAFT,
                    assignees=list(content.assignees),
                )
            case None:
                raise ValueError("item has no content")
            case _:
                assert_never(content)

    def _apply_field_value(
        self, processed: ProcessedItem, field_name: str, value: FieldValue
    ) -> None:
        attribute = self.mappings.match_field(field_name)
        match value:
            case TextValue(text=text):
                if text is not None:
                    self._assign(processed, attribute, field_name, text)
            case SingleSelectValue(name=name):
                if name is not None:
                    self._assign(processed, attribute, field_name, name)
            case DateValue(date=date):
                try:
                    parsed = parse_datetime(date)
                except ValueError:
                    logger.debug("Ignoring invalid date %r in field %s", date, field_name)
                    return
                if parsed is not None:
                    self._assign(processed, attribute, field_name, parsed)
            case NumberValue(number=number):
                if number is not None:
                    self._assign(processed, attribute, field_name, number)
            case MilestoneValue(milestone=milestone):
                if milestone is not None:
                    processed.project_milestone = MilestoneRef(
                        title=milestone.title,
                        due_date=parse_datetime(milestone.due_on),
                        state=milestone.state,
                        description=milestone.description,
                    )
            case IterationValue(title=title, start_date=start_date, duration=duration):
                processed.iteration = IterationRef(
                    title=title,
                    start_date=parse_datetime(start_date),
                    duration=duration,
                )
                if attribute == "sprint" and title:
                    processed.sprint = title
            case _:
                assert_never(value)

    def _assign(
        self, processed: ProcessedItem, attribute: str | None, field_name: str, value: Any
    ) -> None:
        if attribute is None:
            processed.custom_fields[field_name] = value
            return
        try:
            coerced = _coerce(attribute, value)
        except (TypeError, ValueError):
            logger.debug("Field %s value %r does not fit %s", field_name, value, attribute)
            processed.custom_fields[field_name] = value
            return
        setattr(processed, attribute, coerced)

    def enrich(self, items: list[ProcessedItem]) -> list[ProcessedItem]:
        """Fill in epic, priority, status, dates and duration.

        An item whose dates cannot be computed, such as one pushed past
        year 9999, is logged and left out.

        Args:
            items: Mapped items; modified in place.

        Returns:
            The enriched items, in their original order.
        """
        logger.debug("Enriching %d item(s) with defaults", len(items))
        now = self.now()
        enriched = []
        for item in items:
            if not item.epic:
                item.epic = self.infer_epic(item.labels) or DEFAULT_EPIC
            if not item.priority:
                item.priority = self.infer_priority(item.labels) or PRIORITY_MEDIUM
            if not item.status:
                item.status = infer_status(item.state, item.type)
            try:
                self.apply_default_dates(item, now)
                item.duration_days = compute_duration(item.start_date, item.due_date)
            except (OverflowError, ValueError) as e:
                logger.error("Error enriching item %s: %s", item.id, e)
                continue
            enriched.append(item)
        return enriched

    def infer_epic(self, labels: Iterable[str]) -> str | None:
        """Infer an epic name from labels.

        "epic: Auth", "feature: Auth" and "area: Auth" labels name the epic
        directly; otherwise the first label containing an epic keyword is
        used, capitalized.
        """
        labels = list(labels)
        for label in labels:
            lowered = label.lower()
            if lowered.startswith(self.mappings.epic_prefixes) or any(
                marker in lowered for marker in self.mappings.epic_markers
            ):
                return label.split(":")[1].strip() or label

        for label in labels:
            lowered = label.lower()
            if any(keyword in lowered for keyword in self.mappings.epic_keywords):
                return label[:1].upper() + label[1:].lower()

        return None

    def infer_priority(self, labels: Iterable[str]) -> str | None:
        """Infer a priority from labels.

        The keyword table is scanned in order and the first keyword equal to
        any label (case-insensitive) decides.
        """
        lowered = {label.lower() for label in labels}
        for keyword, priority in self.mappings.priority_keywords:
            if keyword in lowered:
                return priority
        return None

    def apply_default_dates(self, item: ProcessedItem, now: datetime) -> None:
        """Set missing start and due dates.

        Start falls back to the creation date, then to now. A missing due
        date is estimated from story points when present, else from priority.
        """
        if item.start_date is None:
            item.start_date = item.created_at or now

        if item.due_date is None:
            days = self.mappings.days_for_priority(item.priority)
            if item.estimation:
                days = max(1, math.ceil(item.estimation * self.mappings.days_per_point))
            item.due_date = item.start_date + timedelta(days=days)
            item.due_date_estimated = True


def analyze_data_quality(items: list[ProcessedItem]) -> DataQuality:
    """Summarize how many items carried explicit planning data."""
    return DataQuality(
        total=len(items),
        with_dates=sum(1 for item in items if item.due_date and not item.due_date_estimated),
        with_epic=sum(1 for item in items if item.epic and item.epic != DEFAULT_EPIC),
        with_priority=sum(1 for item in items if item.priority),
        with_status=sum(1 for item in items if item.status),
        estimated_dates=sum(1 for item in items if item.due_date_estimated),
    )


def _coerce(attribute: str, value: Any) -> Any:
    if attribute in _DATE_ATTRIBUTES:
        if isinstance(value, datetime):
            return value
        parsed = parse_datetime(str(value))
        if parsed is None:
            raise ValueError("empty date")
        return parsed
    if attribute == "estimation":
        return float(value)
    return str(value)
