"""
Shared test fixtures and configuration.
"""

import logging
from pathlib import Path

import pytest

from ossm_gitops.core.models.generator import GeneratorConfig
from ossm_gitops.core.observability.logging_config import PACKAGE_LOGGER
from ossm_gitops.core.services.remote_fetch import FetchResult

BOOKINFO_BODY = b"# bookinfo sample\napiVersion: v1\nkind: Service\nmetadata:\n  name: details\n"


@pytest.fixture
def bookinfo_body() -> bytes:
    """Return the body served by the fake fetcher."""
    return BOOKINFO_BODY


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    """Return an empty directory to generate into."""
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def central_config() -> GeneratorConfig:
    """Config used by the concrete scenario: custom repo, central namespace."""
    return GeneratorConfig(
        repo_url="https://example.com/org/repo.git",
        observability_namespace="central-observability",
    )


@pytest.fixture
def ok_fetcher():
    """Fetcher that always returns a fixed Bookinfo body."""
    calls: list[str] = []

    def fetch(config: GeneratorConfig) -> FetchResult:
        calls.append(config.fetch_url)
        return FetchResult(
            url=config.fetch_url, ok=True, status=200, content=BOOKINFO_BODY, attempts=1,
        )

    fetch.calls = calls
    return fetch


@pytest.fixture
def failing_fetcher():
    """Fetcher that simulates an unreachable host."""

    def fetch(config: GeneratorConfig) -> FetchResult:
        return FetchResult(
            url=config.fetch_url,
            error="Cannot reach host: [Errno -2] Name or service not known",
            attempts=1,
        )

    return fetch


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo setup_logging() calls made by CLI and logging tests."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    for h in logger.handlers:
        if h not in handlers:
            h.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
