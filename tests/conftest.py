"""Pytest configuration and shared fixtures for the lark2md test suite.

This module provides shared fixtures, test configuration, and the
Hypothesis profiles used by the property-based tests.
"""

import os
from pathlib import Path
from typing import Generator

import pytest
from hypothesis import Phase, Verbosity, settings
from utils import cleanup_test_dir, create_test_temp_dir, sample_snapshot

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=30)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - load, transform and render together")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")
    config.addinivalue_line("markers", "property: Property-based tests driven by Hypothesis")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files.

    Yields
    ------
    Path
        Temporary directory path that will be cleaned up after test.

    """
    temp_path = create_test_temp_dir()
    try:
        yield temp_path
    finally:
        cleanup_test_dir(temp_path)


@pytest.fixture
def snapshot_blocks() -> list[dict]:
    """Raw open-API block objects for a small but varied document."""
    return sample_snapshot()


@pytest.fixture
def snapshot_file(temp_dir: Path, snapshot_blocks: list[dict]) -> Path:
    """The sample snapshot written as an open-API style JSON response."""
    import json

    path = temp_dir / "blocks.json"
    path.write_text(json.dumps({"code": 0, "data": {"items": snapshot_blocks}}), encoding="utf-8")
    return path
