"""ReadmeUpdater - Splices the roadmap into a Markdown file between markers."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from roadmapgen.readme.exceptions import ReadmeUpdateError

logger = logging.getLogger("roadmapgen.readme")

START_MARKER = "<!-- ROADMAP-START -->"
END_MARKER = "<!-- ROADMAP-END -->"

_PLACEHOLDER = "<!-- Roadmap will be automatically generated here -->"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReadmeUpdater:
    """Replaces the roadmap block of a README, leaving the rest untouched.

    The block is everything between START_MARKER and END_MARKER. Updating
    twice with the same chart gives the same file.
    """

    def __init__(
        self,
        project_url: str | None = None,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the Readme Updater.

        Args:
            project_url: Project board URL linked from the section footer.
            now: Clock used for the footer date and backup names.
        """
        self.project_url = project_url
        self.now = now

    def default_template(self, title: str = "Project") -> str:
        """Minimal README used when the target file does not exist."""
        return (
            f"# {title}\n"
            "\n"
            "## Roadmap\n"
            "\n"
            f"{START_MARKER}\n"
            f"{_PLACEHOLDER}\n"
            f"{END_MARKER}\n"
        )

    def render_section(self, chart: str, statistics: str = "") -> str:
        """Build the Markdown placed between the markers."""
        generated_on = self.now().strftime("%A, %B %d, %Y")
        parts = [
            "## Project Roadmap",
            "",
            "This roadmap is generated automatically from our GitHub Project.",
            "",
            "```mermaid",
            chart.strip(),
            "```",
            "",
        ]
        if statistics:
            parts.extend([statistics.strip(), ""])
        parts.append("---")
        if self.project_url:
            parts.append(
                f"*This roadmap is generated from [GitHub Projects]({self.project_url})*  "
            )
        parts.append(f"*Generated on: {generated_on}*")
        return "\n".join(parts)

    def splice(self, content: str, section: str) -> str:
        """Insert or replace the roadmap block in existing content.

        Args:
            content: Current file content.
            section: Markdown to place between the markers.

        Returns:
            Updated content.
        """
        block = f"{START_MARKER}\n{section}\n{END_MARKER}"
        start = content.find(START_MARKER)
        end = content.find(END_MARKER, start + len(START_MARKER)) if start != -1 else -1

        if start != -1 and end != -1:
            return content[:start] + block + content[end + len(END_MARKER) :]

        if start != -1:
            logger.warning("Found start marker but no end marker, adding end marker")
            return content[:start] + block + content[start + len(START_MARKER) :]

        end = content.find(END_MARKER)
        if end != -1:
            logger.warning("Found end marker but no start marker, adding start marker")
            return content[:end] + block + content[end + len(END_MARKER) :]

        # No block yet: place it after the first top-level heading and its badges
        lines = content.split("\n")
        insert_at = 0
        for index, line in enumerate(lines):
            if line.startswith("# "):
                insert_at = index + 1
                while insert_at < len(lines) and _is_header_decoration(lines[insert_at]):
                    insert_at += 1
                break

        before = "\n".join(lines[:insert_at])
        after = "\n".join(lines[insert_at:])
        return f"{before}\n{block}\n{after}"

    def create_backup(self, path: str | Path) -> Path | None:
        """Copy the file to ``<path>.backup.<timestamp>``.

        Backups are best effort: failures are logged and None is returned.

        Args:
            path: File to back up.

        Returns:
            The backup path, or None if there was nothing to back up or the
            copy failed.
        """
        path = Path(path)
        if not path.exists():
            return None

        timestamp = self.now().strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        backup_path = path.with_name(f"{path.name}.backup.{timestamp}")
        try:
            shutil.copy2(path, backup_path)
        except OSError as e:
            logger.warning("Could not create backup of %s: %s", path, e)
            return None

        logger.debug("Created backup: %s", backup_path)
        return backup_path

    def preview(self, chart: str, statistics: str, path: str | Path) -> str:
        """Return the content an update would write, without writing it."""
        content = self._read_or_template(Path(path))
        return self.splice(content, self.render_section(chart, statistics))

    def update(self, chart: str, statistics: str, path: str | Path) -> Path:
        """Back up the file, write the new roadmap, and verify the result.

        Args:
            chart: Mermaid source.
            statistics: Statistics Markdown.
            path: Target file; created from a template if missing.

        Returns:
            The updated file path.

        Raises:
            ReadmeUpdateError: If reading, writing or verification fails.
        """
        path = Path(path)
        logger.info("Updating %s", path)

        try:
            content = self._read_or_template(path)
        except OSError as e:
            raise ReadmeUpdateError(f"Failed to read {path}: {e}") from e

        updated = self.splice(content, self.render_section(chart, statistics))

        self.create_backup(path)

        try:
            path.write_text(updated, encoding="utf-8")
        except OSError as e:
            raise ReadmeUpdateError(f"Failed to write {path}: {e}") from e

        if not self.verify(path):
            raise ReadmeUpdateError(f"{path} failed validation after update")

        logger.info("Successfully updated %s", path)
        return path

    def verify(self, path: str | Path) -> bool:
        """Check the file holds both markers and a Mermaid Gantt block."""
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Could not read %s for validation: %s", path, e)
            return False

        if START_MARKER not in content or END_MARKER not in content:
            logger.error("Roadmap markers not found in %s", path)
            return False

        fence = content.find("```mermaid")
        if fence == -1 or "gantt" not in content[fence:]:
            logger.error("Mermaid Gantt chart not found in %s", path)
            return False

        return True

    def _read_or_template(self, path: Path) -> str:
        if path.exists():
            return path.read_text(encoding="utf-8")
        logger.warning("%s not found, starting from the default template", path)
        return self.default_template()


def _is_header_decoration(line: str) -> bool:
    stripped = line.strip()
    return (
        stripped == ""
        or line.startswith("[![")
        or line.startswith("![")
        or stripped.startswith("<")
    )
