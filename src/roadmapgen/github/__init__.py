"""GitHub client - Reads Projects v2 boards through the GraphQL API."""

from roadmapgen.github.client import GitHubClient, resolve_token
from roadmapgen.github.exceptions import (
    GitHubError,
    ProjectNotFoundError,
    TokenResolutionError,
)
from roadmapgen.github.models import (
    DateValue,
    DraftIssueContent,
    FieldDefinition,
    FieldValue,
    IssueContent,
    ItemContent,
    IterationValue,
    Milestone,
    MilestoneValue,
    NumberValue,
    Project,
    ProjectItem,
    ProjectSummary,
    PullRequestContent,
    SingleSelectValue,
    TextValue,
)

__all__ = [
    "DateValue",
    "DraftIssueContent",
    "FieldDefinition",
    "FieldValue",
    "GitHubClient",
    "GitHubError",
    "IssueContent",
    "ItemContent",
    "IterationValue",
    "Milestone",
    "MilestoneValue",
    "NumberValue",
    "Project",
    "ProjectItem",
    "ProjectNotFoundError",
    "ProjectSummary",
    "PullRequestContent",
    "SingleSelectValue",
    "TextValue",
    "TokenResolutionError",
    "resolve_token",
]
