"""Integration tests for the full roadmap flow.

GraphQL responses are served by an httpx mock transport, so the real
client, processor, chart generator and README updater all run together.
"""

import json
from pathlib import Path

import httpx
import pytest
from helpers import NOW, PROJECT_NODE, date_value, issue_node, select_value

from roadmapgen.config import RoadmapConfig
from roadmapgen.github import GitHubClient, ProjectNotFoundError
from roadmapgen.pipeline import RoadmapPipeline
from roadmapgen.readme import END_MARKER, START_MARKER
from roadmapgen.validator import MermaidValidator

pytestmark = pytest.mark.integration

ITEMS = [
    issue_node(
        number=10,
        title="Payment provider: retry webhooks",
        labels=["critical", "epic: Payments"],
        field_values=[
            select_value("F_status", "Status", "In Progress"),
            date_value("F_start", "Start Date", "2025-03-03"),
            date_value("F_due", "Due Date", "2025-03-07"),
        ],
    ),
    issue_node(number=11, title="Dark mode", labels=["frontend", "p2"]),
    issue_node(
        number=12,
        title="Ship v1",
        state="CLOSED",
        labels=["backend"],
        milestone={"id": "M_1", "title": "v1.0", "dueOn": "2025-04-30T00:00:00Z"},
    ),
]


def _graphql_handler(project_node: dict | None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        query = payload["query"]
        if "projectV2(number:" in query:
            data = {"organization": {"projectV2": project_node}}
            body: dict = {"data": data}
            if project_node is None:
                body["errors"] = [{"type": "NOT_FOUND", "message": "Could not resolve"}]
            return httpx.Response(200, json=body)
        if "projectsV2(first:" in query:
            nodes = [{"id": "PVT_1", "number": 1, "title": "Acme Roadmap", "closed": False}]
            data = {"organization": {"projectsV2": {"nodes": nodes}}}
            return httpx.Response(200, json={"data": data})
        return httpx.Response(
            200,
            json={
                "data": {
                    "node": {"items": {"nodes": ITEMS, "pageInfo": {"hasNextPage": False}}}
                }
            },
        )

    return httpx.MockTransport(handler)


def _run(readme: Path, project_node: dict | None = PROJECT_NODE, dry_run: bool = False):
    github = GitHubClient(token="test-token")
    github._client = httpx.Client(transport=_graphql_handler(project_node))
    config = RoadmapConfig.create("acme", readme_path=readme, dry_run=dry_run)
    validator = MermaidValidator(candidates=[])
    with github:
        return RoadmapPipeline(config, github, validator=validator, now=lambda: NOW).run()


class TestPipelineFlow:
    """End-to-end runs against a mocked GitHub API."""

    def test_generates_roadmap_into_readme(self, tmp_path: Path) -> None:
        readme = tmp_path / "README.md"
        readme.write_text("# Acme\n[![CI](https://x.test/ci.svg)](https://x.test)\n\nAbout Acme.\n")

        result = _run(readme)

        content = readme.read_text()
        block = content[content.index(START_MARKER) : content.index(END_MARKER)]
        assert content.index(START_MARKER) > content.index("[![CI]")
        assert "About Acme." in content
        assert "section Payments\n" in block
        assert "Payment provider retry webhooks :crit, active, task10, 2025-03-03, 4d" in block
        assert "section Milestones\n" in block
        assert "v1.0 :milestone, task_v1_0, 2025-04-30, 0d" in block
        assert "- **Completed:** 1 (33%)" in block
        assert result.validation.warning == "Validation skipped - mmdc not installed"
        assert result.quality.with_dates == 1

    def test_rerun_is_stable(self, tmp_path: Path) -> None:
        readme = tmp_path / "README.md"
        readme.write_text("# Acme\n")

        _run(readme)
        first = readme.read_text()
        _run(readme)

        assert readme.read_text() == first
        assert first.count(START_MARKER) == 1

    def test_chart_passes_heuristic_checks(self, tmp_path: Path) -> None:
        result = _run(tmp_path / "README.md", dry_run=True)

        assert MermaidValidator(candidates=[]).check_common_issues(result.chart) == []

    def test_unknown_project(self, tmp_path: Path) -> None:
        readme = tmp_path / "README.md"

        with pytest.raises(ProjectNotFoundError) as exc_info:
            _run(readme, project_node=None)

        assert [p.title for p in exc_info.value.available_projects] == ["Acme Roadmap"]
        assert not readme.exists()
