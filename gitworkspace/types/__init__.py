"""gitworkspace type definitions.

This module exports all data model types used by the package.
"""

from gitworkspace.types.repos import (
    CachedRepository,
    RepositoryReference,
    ResolvedRepository,
    parse_repository_reference,
)
from gitworkspace.types.workspace import (
    ResolutionFailure,
    RunResult,
    SyncFailure,
    WorkspaceInitOptions,
    WorkspaceRepo,
)

__all__ = [
    # Repository types
    "RepositoryReference",
    "CachedRepository",
    "ResolvedRepository",
    "parse_repository_reference",
    # Workspace types
    "WorkspaceRepo",
    "WorkspaceInitOptions",
    "ResolutionFailure",
    "SyncFailure",
    "RunResult",
]
