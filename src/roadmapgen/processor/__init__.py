"""Data Processor - Turns raw board items into canonical roadmap items."""

from roadmapgen.processor.mappings import DEFAULT_MAPPINGS, FieldMappings
from roadmapgen.processor.models import (
    DataQuality,
    ItemType,
    IterationRef,
    MilestoneRef,
    ProcessedItem,
)
from roadmapgen.processor.processor import (
    DataProcessor,
    analyze_data_quality,
    compute_duration,
    infer_status,
    parse_datetime,
)

__all__ = [
    "DEFAULT_MAPPINGS",
    "DataProcessor",
    "DataQuality",
    "FieldMappings",
    "ItemType",
    "IterationRef",
    "MilestoneRef",
    "ProcessedItem",
    "analyze_data_quality",
    "compute_duration",
    "infer_status",
    "parse_datetime",
]
