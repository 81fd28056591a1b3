"""Exceptions for the roadmap pipeline."""


class PipelineError(Exception):
    """Base exception for pipeline errors."""


class MermaidValidationError(PipelineError):
    """The generated chart failed Mermaid validation."""

    def __init__(
        self,
        error: str | None,
        line: str | None = None,
        warnings: list[str] | None = None,
    ) -> None:
        message = "Mermaid validation failed - chart would be invalid"
        if error:
            message += f": {error}"
        super().__init__(message)
        self.error = error
        self.line = line
        self.warnings = warnings or []


class PipelineCancelledError(PipelineError):
    """The run was cancelled between stages."""
