"""GitHubClient - Reads GitHub Projects v2 boards over the GraphQL API."""

from __future__ import annotations

import logging
import subprocess
from typing import Any

import httpx

from roadmapgen.github.exceptions import GitHubError, ProjectNotFoundError, TokenResolutionError
from roadmapgen.github.models import Project, ProjectItem, ProjectSummary
from roadmapgen.logging import sanitize_for_log

logger = logging.getLogger("roadmapgen.github")

GH_CLI_SENTINEL = "use-gh-cli"

DEFAULT_PAGE_SIZE = 100

PROJECT_QUERY = """
query($organization: String!, $projectNumber: Int!) {
    organization(login: $organization) {
        projectV2(number: $projectNumber) {
            id
            number
            title
            shortDescription
            url
            fields(first: 20) {
                nodes {
                    __typename
                    ... on ProjectV2Field {
                        id
                        name
                        dataType
                    }
                    ... on ProjectV2SingleSelectField {
                        id
                        name
                        dataType
                        options {
                            id
                            name
                            color
                        }
                    }
                    ... on ProjectV2IterationField {
                        id
                        name
                        dataType
                        configuration {
                            iterations {
                                id
                                title
                                startDate
                                duration
                            }
                        }
                    }
                }
            }
        }
    }
}
"""

_FIELD_REF = """
                            field {
                                ... on ProjectV2FieldCommon {
                                    id
                                    name
                                }
                            }"""

_MILESTONE = """
                                id
                                title
                                description
                                dueOn
                                state"""

ITEMS_QUERY = f"""
query($projectId: ID!, $first: Int!) {{
    node(id: $projectId) {{
        ... on ProjectV2 {{
            items(first: $first) {{
                nodes {{
                    id
                    type
                    fieldValues(first: 20) {{
                        nodes {{
                            __typename
                            ... on ProjectV2ItemFieldTextValue {{{_FIELD_REF}
                                text
                            }}
                            ... on ProjectV2ItemFieldSingleSelectValue {{{_FIELD_REF}
                                name
                                optionId
                            }}
                            ... on ProjectV2ItemFieldDateValue {{{_FIELD_REF}
                                date
                            }}
                            ... on ProjectV2ItemFieldNumberValue {{{_FIELD_REF}
                                number
                            }}
                            ... on ProjectV2ItemFieldMilestoneValue {{{_FIELD_REF}
                                milestone {{{_MILESTONE}
                                }}
                            }}
                            ... on ProjectV2ItemFieldIterationValue {{{_FIELD_REF}
                                title
                                startDate
                                duration
                            }}
                        }}
                    }}
                    content {{
                        __typename
                        ... on Issue {{
                            id
                            title
                            url
                            state
                            createdAt
                            closedAt
                            number
                            body
                            assignees(first: 10) {{
                                nodes {{
                                    login
                                }}
                            }}
                            labels(first: 20) {{
                                nodes {{
                                    name
                                }}
                            }}
                            milestone {{{_MILESTONE}
                            }}
                        }}
                        ... on PullRequest {{
                            id
                            title
                            url
                            state
                            createdAt
                            closedAt
                            mergedAt
                            number
                            body
                            assignees(first: 10) {{
                                nodes {{
                                    login
                                }}
                            }}
                            labels(first: 20) {{
                                nodes {{
                                    name
                                }}
                            }}
                        }}
                        ... on DraftIssue {{
                            id
                            title
                            body
                            assignees(first: 10) {{
                                nodes {{
                                    login
                                }}
                            }}
                        }}
                    }}
                }}
                pageInfo {{
                    hasNextPage
                    endCursor
                }}
            }}
        }}
    }}
}}
"""

ORGANIZATION_PROJECTS_QUERY = """
query($organization: String!) {
    organization(login: $organization) {
        projectsV2(first: 20) {
            nodes {
                id
                number
                title
                shortDescription
                url
                closed
                visibility
            }
        }
    }
}
"""


def resolve_token(token: str | None) -> str:
    """Return a usable GitHub token.

    An empty token or the ``use-gh-cli`` sentinel asks the locally installed
    GitHub CLI for one.

    Args:
        token: Configured token, possibly empty.

    Returns:
        The token to authenticate with.

    Raises:
        TokenResolutionError: If no token is configured and ``gh auth token``
            is unavailable or fails.
    """
    if token and token != GH_CLI_SENTINEL:
        return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            check=True,
            timeout=30,
        )
    except FileNotFoundError as e:
        raise TokenResolutionError(
            "No GITHUB_TOKEN set and the GitHub CLI is not installed"
        ) from e
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
        raise TokenResolutionError(
            "Failed to get GitHub CLI token. Run: gh auth login or set GITHUB_TOKEN"
        ) from e

    cli_token = result.stdout.strip()
    if not cli_token:
        raise TokenResolutionError("GitHub CLI returned an empty token")
    logger.info("Using GitHub CLI token")
    return cli_token


class GitHubClient:
    """Read-only client for GitHub Projects (ProjectsV2) boards.

    Uses the GitHub GraphQL API. Items are fetched as a single page.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com/graphql",
        timeout: float = 30.0,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub token with read:project scope
            base_url: GitHub GraphQL API URL (for testing/enterprise)
            timeout: HTTP timeout in seconds
        """
        self.token = token
        self.base_url = base_url
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for GraphQL API."""
        if self._client is None:
            self._client = httpx.Client(
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL query.

        NOT_FOUND errors are not raised here; the caller sees the null node
        in the returned data and decides what is missing.

        Args:
            query: GraphQL query string
            variables: Query variables

        Returns:
            Response data

        Raises:
            GitHubError: If the request or query fails
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            response = self.client.post(self.base_url, json=payload)
        except httpx.HTTPError as e:
            raise GitHubError(f"GraphQL request failed: {sanitize_for_log(str(e))}") from e

        if response.status_code != 200:
            raise GitHubError(
                f"GraphQL request failed: {response.status_code} - "
                f"{sanitize_for_log(response.text)}"
            )

        data: dict[str, Any] = response.json()
        errors = data.get("errors") or []
        if errors:
            if data.get("data") and all(err.get("type") == "NOT_FOUND" for err in errors):
                logger.debug("GraphQL NOT_FOUND: %s", errors)
            else:
                raise GitHubError(f"GraphQL errors: {errors}")

        return dict(data.get("data") or {})

    def get_project(self, organization: str, project_number: int) -> Project:
        """Get a project with its field definitions.

        Args:
            organization: Organization login
            project_number: Project number (visible in the project URL)

        Returns:
            Project with fields

        Raises:
            ProjectNotFoundError: If the organization has no such project
        """
        logger.info("Fetching project #%d from %s", project_number, organization)
        data = self._graphql(
            PROJECT_QUERY,
            {"organization": organization, "projectNumber": project_number},
        )

        node = (data.get("organization") or {}).get("projectV2")
        if not node:
            raise ProjectNotFoundError(organization, project_number)

        project = Project.from_node(node)
        logger.info("Found project: %s (%d fields)", project.title, len(project.fields))
        return project

    def get_project_items(
        self, project_id: str, page_size: int = DEFAULT_PAGE_SIZE
    ) -> list[ProjectItem]:
        """Get items of a project with their content and field values.

        Only the first page is fetched; a warning is logged when GitHub
        reports more.

        Args:
            project_id: Project node ID
            page_size: Number of items to request

        Returns:
            Parsed project items. Items that cannot be parsed are skipped.
        """
        logger.info("Fetching project items (first %d)", page_size)
        data = self._graphql(ITEMS_QUERY, {"projectId": project_id, "first": page_size})

        connection = (data.get("node") or {}).get("items") or {}
        nodes = connection.get("nodes") or []

        items = []
        for node in nodes:
            if not node:
                continue
            try:
                items.append(ProjectItem.from_node(node))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed project item %s: %r", node.get("id"), e)

        logger.info("Retrieved %d project item(s)", len(items))

        if (connection.get("pageInfo") or {}).get("hasNextPage"):
            logger.warning(
                "More than %d items on the board; only the first page is used "
                "(pagination is not implemented)",
                page_size,
            )

        return items

    def get_organization_projects(self, organization: str) -> list[ProjectSummary]:
        """List an organization's projects, for diagnostics.

        Args:
            organization: Organization login

        Returns:
            Up to 20 project summaries
        """
        logger.info("Fetching projects from %s", organization)
        data = self._graphql(ORGANIZATION_PROJECTS_QUERY, {"organization": organization})

        nodes = ((data.get("organization") or {}).get("projectsV2") or {}).get("nodes") or []
        projects = [ProjectSummary.from_node(node) for node in nodes if node]

        logger.info("Found %d project(s)", len(projects))
        for project in projects:
            logger.info("  - #%d: %s (%s)", project.number, project.title, project.visibility)

        return projects
