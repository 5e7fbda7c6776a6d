"""
Pytest configuration and shared fixtures for fskit tests.
"""

import pytest
import tempfile
from pathlib import Path
from typing import Generator

# Import test fixtures to make them available to all tests
# ruff: noqa: F401
from tests.fixtures.directories import (
    sample_tree,
    case_sensitive_fs,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "symlink: marks tests that need symlink support"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory(prefix="fskit_test_") as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_cwd(temp_dir: Path, monkeypatch) -> Path:
    """Run the test from an empty directory so no fskit.yaml is picked up."""
    cwd = temp_dir / "cwd"
    cwd.mkdir()
    monkeypatch.chdir(cwd)
    return cwd
