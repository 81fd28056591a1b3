"""Validator - Checks Mermaid syntax before the README is touched."""

from roadmapgen.validator.models import ValidationResult
from roadmapgen.validator.validator import DEFAULT_MMDC_CANDIDATES, MermaidValidator

__all__ = [
    "DEFAULT_MMDC_CANDIDATES",
    "MermaidValidator",
    "ValidationResult",
]
