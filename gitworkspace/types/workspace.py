"""Workspace data models."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from gitworkspace.types.repos import RepositoryReference, ResolvedRepository

if TYPE_CHECKING:
    from gitworkspace.git import GitSession


@dataclass(eq=False)
class WorkspaceRepo:
    """
    A resolved GitHub repository bound to its local directory and an
    active git session on that directory.

    Compared and hashed by identity, so it can key a failure mapping.
    """

    dir: Path
    git: "GitSession"
    github: ResolvedRepository


@dataclass
class WorkspaceInitOptions:
    """Options for Workspace.init()."""

    fresh: bool = False
    verbose: bool = False


@dataclass
class ResolutionFailure:
    """A repository reference that could not be resolved against GitHub."""

    reference: RepositoryReference
    error: Exception


@dataclass
class SyncFailure:
    """A workspace repository whose clone/update/checkout failed."""

    repo: WorkspaceRepo
    error: Exception


@dataclass
class RunResult:
    """Outcome of Workspace.run(): successful repos and per-repo errors."""

    succeeded: list[WorkspaceRepo] = field(default_factory=list)
    failed: dict[WorkspaceRepo, Exception] = field(default_factory=dict)

    def __iter__(self) -> Iterator[Any]:
        yield self.succeeded
        yield self.failed
