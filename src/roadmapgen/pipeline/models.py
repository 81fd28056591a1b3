"""Data models for the roadmap pipeline."""

from dataclasses import dataclass, field
from pathlib import Path

from roadmapgen.chart.models import Statistics
from roadmapgen.github.models import Project
from roadmapgen.processor.models import DataQuality, ProcessedItem
from roadmapgen.validator.models import ValidationResult


@dataclass
class PipelineResult:
    """Outcome of one roadmap generation run.

    Attributes:
        project: The fetched project.
        items: Enriched items.
        chart: Generated Mermaid source.
        statistics: Item counts.
        statistics_text: Statistics rendered as Markdown.
        validation: Mermaid validation result.
        quality: Data quality summary.
        dry_run: Whether the README write was skipped.
        readme_path: The written README (None on dry runs).
        preview: Content the README would get (dry runs only).
        warnings: Heuristic chart warnings, if validation failed.
    """

    project: Project
    items: list[ProcessedItem]
    chart: str
    statistics: Statistics
    statistics_text: str
    validation: ValidationResult
    quality: DataQuality
    dry_run: bool = False
    readme_path: Path | None = None
    preview: str | None = None
    warnings: list[str] = field(default_factory=list)
