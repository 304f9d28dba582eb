"""Shared pytest configuration and fixtures."""

import os

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless ``DOC_INGEST_INTEGRATION=1``."""
    if os.environ.get("DOC_INGEST_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set DOC_INGEST_INTEGRATION=1 to run against a live Chroma")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)
