"""Custom exceptions for the GitHub client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from roadmapgen.github.models import ProjectSummary


class GitHubError(Exception):
    """Base exception for GitHub client errors."""


class ProjectNotFoundError(GitHubError):
    """GitHub Project not found in the organization."""

    def __init__(self, organization: str, project_number: int) -> None:
        super().__init__(
            f"Project #{project_number} not found in organization '{organization}'"
        )
        self.organization = organization
        self.project_number = project_number
        # Filled in by the pipeline for diagnostics
        self.available_projects: list[ProjectSummary] = []


class TokenResolutionError(GitHubError):
    """No usable token: none configured and the GitHub CLI could not provide one."""
