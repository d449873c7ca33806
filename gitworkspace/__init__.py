"""gitworkspace - Synchronize a directory with many GitHub repositories."""

from gitworkspace.bower import BowerSession, merge_bower_configs
from gitworkspace.exceptions import (
    AlreadyInitializedError,
    AuthenticationError,
    AuthorizationError,
    CommandFailedError,
    ConfigurationError,
    DirectoryConflictError,
    HostingAPIError,
    MalformedPatternError,
    MissingDependencyError,
    NotInitializedError,
    RateLimitedError,
    RepositoryMovedError,
    RepositoryNotFoundError,
    ServerError,
    ValidationError,
    WorkspaceError,
)
from gitworkspace.git import GitSession
from gitworkspace.github import GitHubConnection
from gitworkspace.logging import configure_logging, get_logger
from gitworkspace.rate_limiter import RateLimiter
from gitworkspace.transport import AsyncHTTPTransport, RetryConfig
from gitworkspace.types import (
    CachedRepository,
    RepositoryReference,
    ResolutionFailure,
    ResolvedRepository,
    RunResult,
    SyncFailure,
    WorkspaceInitOptions,
    WorkspaceRepo,
    parse_repository_reference,
)
from gitworkspace.workspace import Workspace

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main entry points
    "Workspace",
    "GitHubConnection",
    "GitSession",
    "BowerSession",
    "RateLimiter",
    # Types
    "RepositoryReference",
    "CachedRepository",
    "ResolvedRepository",
    "WorkspaceRepo",
    "WorkspaceInitOptions",
    "ResolutionFailure",
    "SyncFailure",
    "RunResult",
    "parse_repository_reference",
    "merge_bower_configs",
    # Exceptions
    "WorkspaceError",
    "ConfigurationError",
    "MalformedPatternError",
    "HostingAPIError",
    "AuthenticationError",
    "AuthorizationError",
    "RepositoryNotFoundError",
    "RepositoryMovedError",
    "RateLimitedError",
    "ValidationError",
    "ServerError",
    "CommandFailedError",
    "DirectoryConflictError",
    "MissingDependencyError",
    "AlreadyInitializedError",
    "NotInitializedError",
    # Transport
    "AsyncHTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
