"""Chart Generator - Emits Mermaid Gantt syntax and roadmap statistics."""

from roadmapgen.chart.generator import (
    ChartGenerator,
    priority_rank,
    sanitize_section_name,
    sanitize_title,
    task_id,
)
from roadmapgen.chart.models import ChartConfig, MilestoneEntry, Statistics

__all__ = [
    "ChartConfig",
    "ChartGenerator",
    "MilestoneEntry",
    "Statistics",
    "priority_rank",
    "sanitize_section_name",
    "sanitize_title",
    "task_id",
]
