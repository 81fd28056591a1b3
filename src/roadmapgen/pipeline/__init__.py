"""Pipeline - Drives the roadmap stages from fetch to README update."""

from roadmapgen.pipeline.cancellation import CancellationToken
from roadmapgen.pipeline.exceptions import (
    MermaidValidationError,
    PipelineCancelledError,
    PipelineError,
)
from roadmapgen.pipeline.models import PipelineResult
from roadmapgen.pipeline.pipeline import RoadmapPipeline

__all__ = [
    "CancellationToken",
    "MermaidValidationError",
    "PipelineCancelledError",
    "PipelineError",
    "PipelineResult",
    "RoadmapPipeline",
]
