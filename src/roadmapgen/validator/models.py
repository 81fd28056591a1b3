"""Data models for the Mermaid validator."""

from dataclasses import dataclass


@dataclass
class ValidationResult:
    """Outcome of validating a chart.

    Attributes:
        valid: Whether the chart rendered (or validation was skipped).
        error: Renderer error output when invalid.
        warning: Why validation was skipped, if it was.
        line_number: Chart line named in the error, if any.
        line: Text of that line.
    """

    valid: bool
    error: str | None = None
    warning: str | None = None
    line_number: int | None = None
    line: str | None = None
