"""MermaidValidator - Checks generated charts with the Mermaid CLI.

Renders the chart with ``mmdc`` and reads the exit status. When ``mmdc`` is
not installed validation is skipped with a warning rather than failing the
run.
"""

from __future__ import annotations

import logging
import re
import subprocess
import tempfile
from collections.abc import Sequence
from pathlib import Path

from roadmapgen.logging import truncate_output
from roadmapgen.validator.models import ValidationResult

logger = logging.getLogger("roadmapgen.validator")

DEFAULT_MMDC_CANDIDATES = (
    "./node_modules/.bin/mmdc",
    "../node_modules/.bin/mmdc",
    "../../node_modules/.bin/mmdc",
    "mmdc",
)

KNOWN_TAGS = frozenset({"crit", "done", "active", "milestone"})

# Gantt keywords, matched case-insensitively at the start of a line
_DIRECTIVES = frozenset(
    {
        "gantt",
        "title",
        "dateformat",
        "axisformat",
        "tickinterval",
        "excludes",
        "includes",
        "todaymarker",
        "weekday",
        "inclusiveenddates",
        "topaxis",
        "acctitle",
        "accdescr",
        "section",
    }
)

# Last field of task data: a duration or an end date
_TASK_END = re.compile(r"^(\d+(\.\d+)?[dwhm]|\d{4}-\d{2}-\d{2})$")

_LINE_REFERENCE = re.compile(r"line (\d+)", re.IGNORECASE)


class MermaidValidator:
    """Validates Mermaid Gantt syntax before it reaches the README."""

    def __init__(
        self,
        mmdc: str | None = None,
        candidates: Sequence[str] = DEFAULT_MMDC_CANDIDATES,
        timeout: int = 120,
    ) -> None:
        """Initialize the validator.

        Args:
            mmdc: Path to the mmdc executable. Searched for when not given.
            candidates: Locations probed for mmdc, in order.
            timeout: Maximum seconds for one render.
        """
        self.candidates = tuple(candidates)
        self.timeout = timeout
        self._mmdc = mmdc
        self._searched = mmdc is not None

    @property
    def mmdc(self) -> str | None:
        """The mmdc executable, located on first use."""
        if not self._searched:
            self._mmdc = self.find_mmdc()
            self._searched = True
        return self._mmdc

    def find_mmdc(self) -> str | None:
        """Probe the candidate locations for a working mmdc.

        Returns:
            The first candidate whose ``--version`` succeeds, or None.
        """
        for candidate in self.candidates:
            try:
                result = subprocess.run(
                    [candidate, "--version"],
                    capture_output=True,
                    text=True,
                    timeout=30,
                )
            except (FileNotFoundError, PermissionError, subprocess.TimeoutExpired):
                continue
            if result.returncode == 0:
                logger.debug("Found mmdc at: %s", candidate)
                return candidate

        logger.warning("mmdc not found - skipping Mermaid validation")
        return None

    def validate(self, chart: str) -> ValidationResult:
        """Render the chart with mmdc to check its syntax.

        The chart and the rendered image live in a temporary directory that
        is removed on every outcome.

        Args:
            chart: Mermaid source.

        Returns:
            ValidationResult. valid is True with a warning when mmdc is missing.
        """
        mmdc = self.mmdc
        if mmdc is None:
            return ValidationResult(valid=True, warning="Validation skipped - mmdc not installed")

        with tempfile.TemporaryDirectory(prefix="roadmapgen-") as tmpdir:
            input_path = Path(tmpdir) / "chart.mmd"
            output_path = Path(tmpdir) / "chart.svg"
            input_path.write_text(chart, encoding="utf-8")

            try:
                result = subprocess.run(
                    [mmdc, "-i", str(input_path), "-o", str(output_path), "--quiet"],
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except FileNotFoundError:
                logger.warning("mmdc disappeared from %s - skipping Mermaid validation", mmdc)
                return ValidationResult(
                    valid=True, warning="Validation skipped - mmdc not installed"
                )
            except subprocess.TimeoutExpired:
                logger.error("mmdc timed out after %d seconds", self.timeout)
                return ValidationResult(
                    valid=False, error=f"mmdc timed out after {self.timeout} seconds"
                )

        if result.returncode == 0:
            logger.info("Mermaid syntax is valid")
            return ValidationResult(valid=True)

        error = (result.stderr or result.stdout).strip() or f"mmdc exited with {result.returncode}"
        logger.error("Mermaid syntax error: %s", truncate_output(error))

        line_number, line = _offending_line(chart, error)
        if line is not None:
            logger.error("Line %d: %s", line_number, line)

        return ValidationResult(valid=False, error=error, line_number=line_number, line=line)

    def check_common_issues(self, chart: str) -> list[str]:
        """Scan task lines for common Gantt syntax problems.

        Works without mmdc. Checks for a missing ':' after the task name,
        ':' beyond the separator, and task data that does not split into
        id, start and duration once tags are removed. Task names that begin
        with a Gantt keyword such as "Title" or "section" are flagged too,
        since Mermaid matches keywords in any case.

        Args:
            chart: Mermaid source.

        Returns:
            Human-readable warnings, one per problem found.
        """
        warnings = []
        for number, raw in enumerate(chart.split("\n"), start=1):
            line = raw.strip()
            if not line or line.startswith("%%"):
                continue

            body = line.split("%%", 1)[0].rstrip()
            keyword = body.split(None, 1)[0].rstrip(":").lower()
            if keyword in _DIRECTIVES:
                if _has_task_data(body):
                    warnings.append(
                        f"Line {number}: Task name starts with the keyword '{keyword}' "
                        "and will be read as a directive"
                    )
                continue

            if ":" not in body:
                warnings.append(f"Line {number}: Task is missing the ':' before its data")
                continue

            _, data = body.split(":", 1)
            if ":" in data:
                warnings.append(
                    f"Line {number}: Contains ':' which may break syntax unless it's a tag"
                )

            fields = [part.strip() for part in data.split(",")]
            while fields and fields[0] in KNOWN_TAGS:
                fields.pop(0)

            if len(fields) > 3:
                warnings.append(f"Line {number}: Task name may contain comma which breaks syntax")
            elif len(fields) < 3:
                warnings.append(
                    f"Line {number}: Task may be missing required fields (id, start, duration)"
                )

        return warnings


def _offending_line(chart: str, error: str) -> tuple[int | None, str | None]:
    match = _LINE_REFERENCE.search(error)
    if not match:
        return None, None
    line_number = int(match.group(1))
    lines = chart.split("\n")
    if 0 < line_number <= len(lines):
        return line_number, lines[line_number - 1]
    return line_number, None


def _has_task_data(body: str) -> bool:
    if ":" not in body:
        return False
    fields = [part.strip() for part in body.split(":", 1)[1].split(",")]
    return len(fields) >= 2 and bool(_TASK_END.match(fields[-1]))
