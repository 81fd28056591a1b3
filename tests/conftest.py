"""Shared pytest fixtures and configuration."""

import logging
from collections.abc import Iterator

import pytest


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")
    config.addinivalue_line("markers", "real: actual GitHub API calls (local only)")


@pytest.fixture(autouse=True)
def reset_roadmapgen_logger() -> Iterator[None]:
    """Drop handlers installed by setup_logging so caplog sees every record."""
    yield
    logger = logging.getLogger("roadmapgen")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
