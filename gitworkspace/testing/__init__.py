"""gitworkspace testing utilities.

Provides a fake GitHub API and fixtures for testing code built on gitworkspace.
"""

from gitworkspace.testing.fixtures import create_mock_repository
from gitworkspace.testing.mock import MockCall, MockGitHubAPI

__all__ = [
    # Fake API
    "MockGitHubAPI",
    "MockCall",
    # Helper functions
    "create_mock_repository",
]
