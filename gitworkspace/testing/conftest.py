"""
Pytest plugin for gitworkspace testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest when this package is installed.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["gitworkspace.testing.conftest"]

Or import the fixtures directly:

    from gitworkspace.testing.fixtures import mock_github, sample_repository
"""

# Re-export all fixtures for pytest auto-discovery
from gitworkspace.testing.fixtures import (
    mock_github,
    mock_github_with_org,
    sample_repository,
)

__all__ = [
    "mock_github",
    "mock_github_with_org",
    "sample_repository",
]
