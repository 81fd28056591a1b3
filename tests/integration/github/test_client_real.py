"""Integration tests for GitHubClient against the real GitHub API.

These tests require:
- GITHUB_TOKEN environment variable (read:project scope)
- GITHUB_TEST_ORG environment variable (organization login)
- GITHUB_TEST_PROJECT_NUMBER environment variable (project number)

Run with: pytest tests/integration/github/ -m real
"""

import os
from collections.abc import Iterator

import pytest

from roadmapgen.github import GitHubClient, ProjectItem, ProjectNotFoundError
from roadmapgen.processor import DataProcessor

# Skip all tests in this module if credentials not available
pytestmark = [
    pytest.mark.integration,
    pytest.mark.real,
    pytest.mark.skipif(
        not os.environ.get("GITHUB_TOKEN")
        or not os.environ.get("GITHUB_TEST_ORG")
        or not os.environ.get("GITHUB_TEST_PROJECT_NUMBER"),
        reason="GITHUB_TOKEN, GITHUB_TEST_ORG, and GITHUB_TEST_PROJECT_NUMBER required",
    ),
]


@pytest.fixture
def organization() -> str:
    return os.environ["GITHUB_TEST_ORG"]


@pytest.fixture
def project_number() -> int:
    return int(os.environ["GITHUB_TEST_PROJECT_NUMBER"])


@pytest.fixture
def github() -> Iterator[GitHubClient]:
    """Create a GitHubClient for the test organization."""
    client = GitHubClient(token=os.environ["GITHUB_TOKEN"])
    yield client
    client.close()


class TestRealGitHub:
    """Read-only calls against a real project board."""

    def test_get_project(
        self, github: GitHubClient, organization: str, project_number: int
    ) -> None:
        project = github.get_project(organization, project_number)

        assert project.id
        assert project.number == project_number
        assert any(field.name == "Status" for field in project.fields)

    def test_items_process_cleanly(
        self, github: GitHubClient, organization: str, project_number: int
    ) -> None:
        project = github.get_project(organization, project_number)
        items = github.get_project_items(project.id)

        assert all(isinstance(item, ProjectItem) for item in items)
        processed = DataProcessor().process_items(items, project.fields)
        assert all(item.duration_days >= 1 for item in processed)

    def test_listed_projects_include_target(
        self, github: GitHubClient, organization: str, project_number: int
    ) -> None:
        projects = github.get_organization_projects(organization)

        assert project_number in [p.number for p in projects]

    def test_unknown_project_number(self, github: GitHubClient, organization: str) -> None:
        with pytest.raises(ProjectNotFoundError):
            github.get_project(organization, 99999)
