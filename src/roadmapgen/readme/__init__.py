"""Readme Updater - Splices the roadmap between marker comments."""

from roadmapgen.readme.exceptions import ReadmeError, ReadmeUpdateError
from roadmapgen.readme.updater import END_MARKER, START_MARKER, ReadmeUpdater

__all__ = [
    "END_MARKER",
    "START_MARKER",
    "ReadmeError",
    "ReadmeUpdateError",
    "ReadmeUpdater",
]
