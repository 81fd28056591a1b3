"""Configuration loading for roadmapgen runs.

Run settings come from CLI options backed by environment variables. An
optional YAML file (``ROADMAP_CONFIG``) adjusts chart settings and the field
mapping tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from roadmapgen.chart.models import ChartConfig
from roadmapgen.processor.mappings import CANONICAL_ATTRIBUTES, DEFAULT_MAPPINGS, FieldMappings

_CHART_KEYS = frozenset(
    {
        "title",
        "date_format",
        "axis_format",
        "include_progress",
        "group_by_epic",
        "show_milestones",
        "max_milestones",
        "links",
    }
)
_TOP_LEVEL_KEYS = frozenset({"chart", "fields", "priority_keywords", "epic_keywords"})


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class RoadmapConfig:
    """Settings for one roadmap generation run.

    Attributes:
        organization: GitHub organization owning the project.
        project_number: Project board number.
        token: GitHub token; empty to ask the GitHub CLI.
        readme_path: File the roadmap is spliced into.
        max_items: Maximum tasks on the chart.
        dry_run: Run every stage except writing the README.
        verbose: Enable debug logging.
        repository: "owner/repo" the run belongs to (informational).
        chart: Chart generation settings.
        mappings: Field mapping and inference tables.
    """

    organization: str
    project_number: int = 1
    token: str = ""
    readme_path: Path = field(default_factory=lambda: Path("README.md"))
    max_items: int = 50
    dry_run: bool = False
    verbose: bool = False
    repository: str | None = None
    chart: ChartConfig = field(default_factory=ChartConfig)
    mappings: FieldMappings = DEFAULT_MAPPINGS

    @classmethod
    def create(
        cls,
        organization: str | None,
        project_number: int = 1,
        token: str | None = None,
        readme_path: str | Path = "README.md",
        max_items: int = 50,
        dry_run: bool = False,
        verbose: bool = False,
        repository: str | None = None,
        overrides_path: str | Path | None = None,
    ) -> RoadmapConfig:
        """Build and validate a run configuration.

        Args:
            organization: GitHub organization (required).
            project_number: Project board number, at least 1.
            token: GitHub token, may be empty.
            readme_path: Target README path.
            max_items: Maximum chart tasks, 0 for no limit.
            dry_run: Skip the README write.
            verbose: Enable debug logging.
            repository: Informational "owner/repo".
            overrides_path: Optional YAML file with chart and mapping overrides.

        Returns:
            Validated configuration.

        Raises:
            ConfigError: If the organization is missing, a number is out of
                range, or the overrides file is invalid.
        """
        if not organization:
            raise ConfigError("Missing required environment variable: GITHUB_ORG or ORGANIZATION")
        if project_number < 1:
            raise ConfigError(f"Project number must be positive, got {project_number}")
        if max_items < 0:
            raise ConfigError(f"MAX_ITEMS must not be negative, got {max_items}")

        chart = ChartConfig(max_items=max_items)
        mappings = DEFAULT_MAPPINGS
        if overrides_path is not None:
            chart, mappings = apply_overrides(load_overrides(overrides_path), chart, mappings)

        return cls(
            organization=organization,
            project_number=project_number,
            token=token or "",
            readme_path=Path(readme_path),
            max_items=max_items,
            dry_run=dry_run,
            verbose=verbose,
            repository=repository,
            chart=chart,
            mappings=mappings,
        )


def load_overrides(config_path: str | Path) -> dict[str, Any]:
    """Load the YAML overrides file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        The parsed mapping.

    Raises:
        ConfigError: If the file doesn't exist or is invalid.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")

    return data


def apply_overrides(
    data: dict[str, Any], chart: ChartConfig, mappings: FieldMappings
) -> tuple[ChartConfig, FieldMappings]:
    """Apply an overrides mapping on top of chart settings and mapping tables.

    Only the tables present in ``data`` are replaced.

    Args:
        data: Parsed overrides file.
        chart: Current chart settings.
        mappings: Current mapping tables.

    Returns:
        New (chart, mappings) pair; the inputs are not modified.

    Raises:
        ConfigError: On unknown keys or malformed values.
    """
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    chart_data = data.get("chart") or {}
    if not isinstance(chart_data, dict):
        raise ConfigError("'chart' must be a mapping")
    unknown = set(chart_data) - _CHART_KEYS
    if unknown:
        raise ConfigError(f"Unknown chart settings: {', '.join(sorted(unknown))}")
    if chart_data:
        chart_changes = dict(chart_data)
        if "links" in chart_changes:
            chart_changes["links"] = _parse_links(chart_changes["links"])
        chart = replace(chart, **chart_changes)

    mapping_changes: dict[str, Any] = {}
    if "fields" in data:
        mapping_changes["field_names"] = _parse_field_names(data["fields"])
    if "priority_keywords" in data:
        mapping_changes["priority_keywords"] = _parse_pairs(
            data["priority_keywords"], "priority_keywords"
        )
    if "epic_keywords" in data:
        keywords = data["epic_keywords"]
        if not isinstance(keywords, list):
            raise ConfigError("'epic_keywords' must be a list")
        mapping_changes["epic_keywords"] = tuple(str(k).lower() for k in keywords)
    if mapping_changes:
        mappings = replace(mappings, **mapping_changes)

    return chart, mappings


def _parse_field_names(value: Any) -> tuple[tuple[str, tuple[str, ...]], ...]:
    if not isinstance(value, dict):
        raise ConfigError("'fields' must map attributes to lists of field names")
    unknown = set(value) - set(CANONICAL_ATTRIBUTES)
    if unknown:
        raise ConfigError(
            f"Unknown field attributes: {', '.join(sorted(unknown))} "
            f"(expected one of {', '.join(CANONICAL_ATTRIBUTES)})"
        )
    for attribute, names in value.items():
        if not isinstance(names, list):
            raise ConfigError(f"'fields.{attribute}' must be a list of field names")
    # Keep the canonical order so first-match resolution is stable
    return tuple(
        (attribute, tuple(str(name) for name in value[attribute]))
        for attribute in CANONICAL_ATTRIBUTES
        if attribute in value
    )


def _parse_pairs(value: Any, key: str) -> tuple[tuple[str, str], ...]:
    if isinstance(value, dict):
        return tuple((str(k).lower(), str(v)) for k, v in value.items())
    if isinstance(value, list) and all(isinstance(p, list) and len(p) == 2 for p in value):
        return tuple((str(k).lower(), str(v)) for k, v in value)
    raise ConfigError(f"'{key}' must be a mapping or a list of [keyword, value] pairs")


def _parse_links(value: Any) -> tuple[tuple[str, str], ...]:
    if not isinstance(value, list):
        raise ConfigError("'chart.links' must be a list")
    links = []
    for entry in value:
        if not isinstance(entry, dict) or "label" not in entry or "url" not in entry:
            raise ConfigError("Each link needs a 'label' and a 'url'")
        links.append((str(entry["label"]), str(entry["url"])))
    return tuple(links)
