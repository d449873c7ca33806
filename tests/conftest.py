"""Shared fixtures for the gitworkspace test suite."""

from gitworkspace.testing.conftest import (  # noqa: F401
    mock_github,
    mock_github_with_org,
    sample_repository,
)
