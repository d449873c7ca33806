"""
Pytest fixtures for gitworkspace testing.

Provides a fake GitHub API and sample repository payloads.
"""

from collections.abc import Generator
from typing import Any

import pytest

from gitworkspace.testing.mock import MockGitHubAPI


def create_mock_repository(
    owner: str = "test-org",
    name: str = "test-repo",
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Create a GitHub repository payload with customizable fields.

    Args:
        owner: Owner login
        name: Repository name
        **kwargs: Additional fields to override (e.g. private=True, default_branch="main")

    Returns:
        Dict shaped like a GitHub API repository object
    """
    payload: dict[str, Any] = {
        "name": name,
        "full_name": f"{owner}/{name}",
        "owner": {"login": owner},
        "private": False,
        "clone_url": f"https://github.com/{owner}/{name}.git",
        "default_branch": "master",
    }
    payload.update(kwargs)
    return payload


@pytest.fixture
def mock_github() -> Generator[MockGitHubAPI, None, None]:
    """
    Provide an empty MockGitHubAPI.

    Example:
        ```python
        async def test_lookup(mock_github):
            mock_github.add_repository(create_mock_repository("org", "a"))
            async with mock_github.connection() as github:
                ...
        ```
    """
    api = MockGitHubAPI()
    yield api
    api.reset()


@pytest.fixture
def sample_repository() -> dict[str, Any]:
    """Provide a sample public repository payload."""
    return create_mock_repository("Polymer", "polymer")


@pytest.fixture
def mock_github_with_org(mock_github: MockGitHubAPI) -> MockGitHubAPI:
    """
    Provide a MockGitHubAPI with org ``org`` owning public repos ``a`` and
    ``b`` and private repo ``c``.
    """
    mock_github.add_org("org")
    mock_github.add_repository(create_mock_repository("org", "a"))
    mock_github.add_repository(create_mock_repository("org", "b", default_branch="main"))
    mock_github.add_repository(create_mock_repository("org", "c", private=True))
    return mock_github


__all__ = [
    # Fixtures (exported for documentation, actual fixtures are auto-discovered)
    "mock_github",
    "mock_github_with_org",
    "sample_repository",
    # Helper functions
    "create_mock_repository",
]
