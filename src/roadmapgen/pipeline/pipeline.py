"""RoadmapPipeline - Runs fetch, process, generate and update in order."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING

from roadmapgen.chart import ChartConfig, ChartGenerator
from roadmapgen.github import GitHubError, Project, ProjectItem, ProjectNotFoundError
from roadmapgen.pipeline.cancellation import CancellationToken
from roadmapgen.pipeline.exceptions import MermaidValidationError
from roadmapgen.pipeline.models import PipelineResult
from roadmapgen.processor import (
    DataProcessor,
    DataQuality,
    ProcessedItem,
    analyze_data_quality,
)
from roadmapgen.processor.processor import utc_now
from roadmapgen.readme import ReadmeUpdater
from roadmapgen.validator import MermaidValidator

if TYPE_CHECKING:
    from roadmapgen.config import RoadmapConfig
    from roadmapgen.github import GitHubClient, ProjectSummary

logger = logging.getLogger("roadmapgen.pipeline")

DEFAULT_TITLE = ChartConfig().title


class RoadmapPipeline:
    """Generates the roadmap for one project board.

    Stages run strictly in sequence and each completes before the next
    starts. The cancellation token is checked between stages. There are no
    retries: a failing stage ends the run.
    """

    def __init__(
        self,
        config: RoadmapConfig,
        client: GitHubClient,
        processor: DataProcessor | None = None,
        validator: MermaidValidator | None = None,
        generator: ChartGenerator | None = None,
        updater: ReadmeUpdater | None = None,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Run configuration.
            client: GitHub client for the fetch stage.
            processor: Data processor. Built from config when omitted.
            validator: Mermaid validator. Built with defaults when omitted.
            generator: Chart generator. Built from config and the fetched
                project (title, board link) when omitted.
            updater: README updater. Built with the project URL when omitted.
            now: Clock for default dates and timestamps.
        """
        self.config = config
        self.client = client
        self.now = now
        self.processor = processor or DataProcessor(config.mappings, now=now)
        self.validator = validator or MermaidValidator()
        self.generator = generator
        self.updater = updater

    def run(self, token: CancellationToken | None = None) -> PipelineResult:
        """Run every stage.

        Args:
            token: Cancellation token checked between stages.

        Returns:
            PipelineResult describing the run.

        Raises:
            ProjectNotFoundError: If the project does not exist.
            GitHubError: If a GitHub request fails.
            MermaidValidationError: If the chart is invalid outside a dry run.
            ReadmeUpdateError: If the README write or its verification fails.
            PipelineCancelledError: If cancelled between stages.
        """
        token = token or CancellationToken()
        logger.info(
            "Starting roadmap generation for %s project #%d",
            self.config.organization,
            self.config.project_number,
        )
        logger.debug(
            "Configuration: repository=%s readme=%s max_items=%d dry_run=%s",
            self.config.repository or "N/A",
            self.config.readme_path,
            self.config.max_items,
            self.config.dry_run,
        )

        token.raise_if_cancelled("fetch")
        logger.info("Step 1: Fetching project data")
        project, raw_items = self.fetch()

        token.raise_if_cancelled("processing")
        logger.info("Step 2: Processing project data")
        items = self.process(project, raw_items)
        quality = analyze_data_quality(items)
        self._log_quality(quality)

        token.raise_if_cancelled("chart generation")
        logger.info("Step 3: Generating Mermaid chart")
        generator = self.generator or ChartGenerator(self._chart_config(project))
        chart = generator.generate_gantt(items)
        statistics = generator.generate_statistics(items)
        statistics_text = generator.render_statistics(statistics, self.now())
        if self.config.verbose:
            preview_lines = chart.split("\n")
            logger.debug(
                "Chart preview:\n%s%s",
                "\n".join(preview_lines[:10]),
                "\n..." if len(preview_lines) > 10 else "",
            )

        logger.info("Validating Mermaid syntax")
        validation = self.validator.validate(chart)
        warnings: list[str] = []
        if validation.warning:
            logger.warning("%s", validation.warning)
        if not validation.valid:
            logger.error("Generated Mermaid chart has syntax errors")
            warnings = self.validator.check_common_issues(chart)
            for warning in warnings:
                logger.warning("  - %s", warning)
            if not self.config.dry_run:
                raise MermaidValidationError(validation.error, validation.line, warnings)

        result = PipelineResult(
            project=project,
            items=items,
            chart=chart,
            statistics=statistics,
            statistics_text=statistics_text,
            validation=validation,
            quality=quality,
            dry_run=self.config.dry_run,
            warnings=warnings,
        )

        token.raise_if_cancelled("README update")
        updater = self.updater or ReadmeUpdater(project_url=project.url, now=self.now)
        if self.config.dry_run:
            result.preview = updater.preview(chart, statistics_text, self.config.readme_path)
            logger.info("Dry run completed - no files were modified")
        else:
            logger.info("Step 4: Updating %s", self.config.readme_path)
            result.readme_path = updater.update(chart, statistics_text, self.config.readme_path)
            logger.info("Roadmap generation completed successfully")

        return result

    def fetch(self) -> tuple[Project, list[ProjectItem]]:
        """Fetch the project and its items.

        On ProjectNotFoundError the organization's projects are listed and
        attached to the error before it is re-raised.
        """
        try:
            project = self.client.get_project(
                self.config.organization, self.config.project_number
            )
        except ProjectNotFoundError as e:
            logger.error("%s", e)
            e.available_projects = self._list_available_projects()
            raise

        logger.debug("Project: %s (%s)", project.title, project.description or "no description")
        items = self.client.get_project_items(project.id)
        if not items:
            logger.warning("No items found in project. The roadmap will be empty.")
        return project, items

    def process(self, project: Project, raw_items: list[ProjectItem]) -> list[ProcessedItem]:
        if not raw_items:
            logger.info("Skipping data processing - no items to process")
            return []
        items = self.processor.process_items(raw_items, project.fields)
        if self.config.verbose and items:
            sample = items[0]
            logger.debug(
                "Sample item: title=%s epic=%s status=%s priority=%s start=%s due=%s",
                sample.title,
                sample.epic,
                sample.status,
                sample.priority,
                sample.start_date,
                sample.due_date,
            )
        return items

    def _list_available_projects(self) -> list[ProjectSummary]:
        try:
            projects = self.client.get_organization_projects(self.config.organization)
        except GitHubError as e:
            logger.error("Could not list projects. Check your token permissions: %s", e)
            return []
        if projects:
            logger.info("Available projects:")
            for project in projects:
                logger.info("  #%d: %s", project.number, project.title)
        return projects

    def _chart_config(self, project: Project) -> ChartConfig:
        chart = self.config.chart
        if chart.title == DEFAULT_TITLE and project.title:
            chart = replace(chart, title=project.title)
        if not chart.links and project.url:
            chart = replace(chart, links=(("Project Board", project.url),))
        return chart

    @staticmethod
    def _log_quality(quality: DataQuality) -> None:
        if not quality.total:
            return
        logger.info("Data quality:")
        for label, count in (
            ("dates", quality.with_dates),
            ("epics", quality.with_epic),
            ("priority", quality.with_priority),
            ("status", quality.with_status),
        ):
            logger.info(
                "  Items with %s: %d/%d (%d%%)", label, count, quality.total, quality.percent(count)
            )
        if quality.estimated_dates:
            logger.warning("%d item(s) have estimated due dates", quality.estimated_dates)
        if quality.with_dates < quality.total * 0.5:
            logger.warning(
                "Less than 50%% of items have proper dates - consider adding "
                "Start Date and Due Date fields to your project"
            )
