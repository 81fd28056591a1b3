"""Unit tests for the roadmapgen CLI."""

import signal
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from roadmapgen.cli import cancel_on_signals, main
from roadmapgen.github import ProjectNotFoundError, ProjectSummary, TokenResolutionError
from roadmapgen.pipeline import CancellationToken, MermaidValidationError
from roadmapgen.validator import ValidationResult

CLEAN_ENV = {
    "GITHUB_ORG": None,
    "ORGANIZATION": None,
    "GITHUB_TOKEN": None,
    "PROJECT_ID": None,
    "README_PATH": None,
    "MAX_ITEMS": None,
    "DRY_RUN": None,
    "VERBOSE": None,
    "ROADMAP_CONFIG": None,
    "GITHUB_REPOSITORY": None,
}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def mock_pipeline() -> Iterator[MagicMock]:
    """Patch RoadmapPipeline and the GitHub wiring used by generate."""
    with (
        patch("roadmapgen.cli.resolve_token", return_value="tok"),
        patch("roadmapgen.cli.GitHubClient"),
        patch("roadmapgen.cli.RoadmapPipeline") as pipeline_cls,
    ):
        yield pipeline_cls


def _result(dry_run: bool) -> MagicMock:
    result = MagicMock()
    result.dry_run = dry_run
    result.chart = "gantt\n    title Acme"
    result.statistics_text = "## Project Statistics"
    result.validation = ValidationResult(valid=True)
    result.readme_path = Path("README.md")
    return result


@pytest.mark.unit
class TestGenerate:
    """Tests for the generate command."""

    def test_missing_organization(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["generate"], env=CLEAN_ENV)

        assert result.exit_code == 1
        assert "GITHUB_ORG or ORGANIZATION" in result.output

    def test_options_from_environment(self, runner: CliRunner, mock_pipeline: MagicMock) -> None:
        mock_pipeline.return_value.run.return_value = _result(dry_run=True)
        env = {
            **CLEAN_ENV,
            "GITHUB_ORG": "acme",
            "PROJECT_ID": "4",
            "MAX_ITEMS": "20",
            "DRY_RUN": "true",
        }

        result = runner.invoke(main, ["generate"], env=env)

        assert result.exit_code == 0, result.output
        config = mock_pipeline.call_args.args[0]
        assert config.organization == "acme"
        assert config.project_number == 4
        assert config.max_items == 20
        assert config.dry_run is True
        assert "gantt\n    title Acme" in result.output
        assert "no files were modified" in result.output

    def test_reports_updated_readme(self, runner: CliRunner, mock_pipeline: MagicMock) -> None:
        mock_pipeline.return_value.run.return_value = _result(dry_run=False)

        result = runner.invoke(main, ["generate", "--org", "acme"], env=CLEAN_ENV)

        assert result.exit_code == 0, result.output
        assert "Updated README.md" in result.output

    def test_project_not_found_lists_projects(
        self, runner: CliRunner, mock_pipeline: MagicMock
    ) -> None:
        error = ProjectNotFoundError("acme", 9)
        error.available_projects = [ProjectSummary(id="PVT_1", number=1, title="Roadmap")]
        mock_pipeline.return_value.run.side_effect = error

        result = runner.invoke(main, ["generate", "--org", "acme", "--project", "9"], env=CLEAN_ENV)

        assert result.exit_code == 1
        assert "Project #9 not found in organization 'acme'" in result.output
        assert "Available projects:" in result.output
        assert "#1: Roadmap" in result.output

    def test_invalid_chart_exits_nonzero(
        self, runner: CliRunner, mock_pipeline: MagicMock
    ) -> None:
        mock_pipeline.return_value.run.side_effect = MermaidValidationError(
            "Parse error", line="bad :line", warnings=["Line 3: Task is missing"]
        )

        result = runner.invoke(main, ["generate", "--org", "acme"], env=CLEAN_ENV)

        assert result.exit_code == 1
        assert "Mermaid validation failed" in result.output
        assert "Line 3: Task is missing" in result.output

    def test_token_resolution_failure(self, runner: CliRunner) -> None:
        with patch(
            "roadmapgen.cli.resolve_token", side_effect=TokenResolutionError("no gh")
        ):
            result = runner.invoke(main, ["generate", "--org", "acme"], env=CLEAN_ENV)

        assert result.exit_code == 1
        assert "no gh" in result.output


@pytest.mark.unit
class TestProjects:
    """Tests for the projects command."""

    def test_lists_projects(self, runner: CliRunner) -> None:
        with (
            patch("roadmapgen.cli.resolve_token", return_value="tok"),
            patch("roadmapgen.cli.GitHubClient") as client_cls,
        ):
            client = client_cls.return_value.__enter__.return_value
            client.get_organization_projects.return_value = [
                ProjectSummary(id="PVT_1", number=1, title="Roadmap", visibility="PUBLIC"),
                ProjectSummary(
                    id="PVT_2", number=2, title="Old", visibility="PRIVATE", closed=True
                ),
            ]
            result = runner.invoke(main, ["projects", "--org", "acme"], env=CLEAN_ENV)

        assert result.exit_code == 0, result.output
        assert "#1: Roadmap (PUBLIC)" in result.output
        assert "#2: Old (PRIVATE) [closed]" in result.output

    def test_requires_organization(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["projects"], env=CLEAN_ENV)

        assert result.exit_code == 1


@pytest.mark.unit
class TestValidate:
    """Tests for the validate command."""

    def test_valid_file(self, runner: CliRunner, tmp_path: Path) -> None:
        chart = tmp_path / "chart.mmd"
        chart.write_text("gantt\nsection A\nTask :task1, 2025-03-10, 3d\n")

        with patch("roadmapgen.cli.MermaidValidator") as validator_cls:
            validator_cls.return_value.validate.return_value = ValidationResult(valid=True)
            validator_cls.return_value.check_common_issues.return_value = []
            result = runner.invoke(main, ["validate", str(chart)], env=CLEAN_ENV)

        assert result.exit_code == 0, result.output
        assert "valid" in result.output

    def test_invalid_file(self, runner: CliRunner, tmp_path: Path) -> None:
        chart = tmp_path / "chart.mmd"
        chart.write_text("gantt\nbroken\n")

        with patch("roadmapgen.cli.MermaidValidator") as validator_cls:
            validator_cls.return_value.validate.return_value = ValidationResult(
                valid=False, error="Parse error on line 2", line_number=2, line="broken"
            )
            validator_cls.return_value.check_common_issues.return_value = [
                "Line 2: Task is missing the ':' before its data"
            ]
            result = runner.invoke(main, ["validate", str(chart)], env=CLEAN_ENV)

        assert result.exit_code == 1
        assert "Line 2: broken" in result.output
        assert "missing the ':'" in result.output


@pytest.mark.unit
class TestCancelOnSignals:
    """Tests for signal handling during a run."""

    def test_sigterm_cancels_and_exits(self) -> None:
        token = CancellationToken()
        previous = signal.getsignal(signal.SIGTERM)

        with pytest.raises(SystemExit) as exc_info:
            with cancel_on_signals(token):
                signal.raise_signal(signal.SIGTERM)

        assert exc_info.value.code == 128 + signal.SIGTERM
        assert token.cancelled
        assert token.reason == "SIGTERM"
        assert signal.getsignal(signal.SIGTERM) == previous
