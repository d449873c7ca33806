"""
Workspace: a local directory holding one clone of every selected GitHub
repository, wired together with a merged Bower manifest.
"""

import asyncio
import inspect
import logging
import os
import shutil
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gitworkspace.bower import BowerSession, merged_bower_config_from_repos
from gitworkspace.exceptions import (
    AlreadyInitializedError,
    ConfigurationError,
    DirectoryConflictError,
    MissingDependencyError,
    NotInitializedError,
)
from gitworkspace.git import GIT_COMMAND, GitSession
from gitworkspace.github import GitHubConnection
from gitworkspace.logging import get_logger
from gitworkspace.process import check_command
from gitworkspace.rate_limiter import DEFAULT_LOCAL_GIT_CONCURRENCY, RateLimiter
from gitworkspace.types.repos import RepositoryReference, ResolvedRepository
from gitworkspace.types.workspace import (
    ResolutionFailure,
    RunResult,
    SyncFailure,
    WorkspaceInitOptions,
    WorkspaceRepo,
)

logger = get_logger()


@dataclass
class _Resolved:
    repo: ResolvedRepository


async def clone_or_update_workspace_repo(repo: WorkspaceRepo) -> None:
    """
    Either clone the given WorkspaceRepo or fetch and reset an existing local
    clone, then check out the repo's ref.

    When the ref is a branch of an existing clone, the local branch is moved
    to the fetched ``origin`` tip so it does not stay at its previous commit.
    """
    ref = repo.github.ref or repo.github.default_branch
    if repo.git.is_git():
        await repo.git.fetch()
        await repo.git.reset()
        await repo.git.checkout(ref)
        if await repo.git.has_remote_branch(ref):
            await repo.git.reset(f"origin/{ref}")
    else:
        await repo.git.clone(repo.github.clone_url)
        await repo.git.checkout(ref)


class Workspace:
    """
    Synchronizes a directory with a set of GitHub repositories.

    Example:
        ```python
        import asyncio
        from gitworkspace import Workspace

        async def main():
            ws = Workspace(token="...", dir=".workspace")
            repos = await ws.init(
                ["PolymerElements/*", "Polymer/polymer#2.0-preview"],
                exclude=["PolymerElements/style-guide"],
                verbose=True,
            )
            succeeded, failed = await ws.run(run_tests)

        asyncio.run(main())
        ```
    """

    def __init__(
        self,
        token: str,
        dir: str | Path,
        *,
        github: GitHubConnection | None = None,
        git_limiter: RateLimiter | None = None,
        session_factory: Callable[[Path], GitSession] = GitSession,
        bower: BowerSession | None = None,
    ) -> None:
        """
        Initialize the workspace.

        Args:
            token: GitHub access token, passed to the GitHub connection
            dir: Workspace root directory
            github: Pre-built GitHubConnection (default: one built from token)
            git_limiter: Limiter bounding concurrent git operations (default: 14)
            session_factory: Builds the git session for a repo directory
            bower: Bower session for the workspace root (default: BowerSession(dir))
        """
        self.dir = Path(dir).resolve()
        self._github = github or GitHubConnection(token)
        self._git_limiter = git_limiter or RateLimiter(DEFAULT_LOCAL_GIT_CONCURRENCY)
        self._session_factory = session_factory
        self._bower = bower or BowerSession(self.dir)
        self._initializing = False
        self._initialized_repos: list[WorkspaceRepo] | None = None
        self.resolution_failures: list[ResolutionFailure] = []
        self.sync_failures: list[SyncFailure] = []

    @classmethod
    def from_env(cls) -> "Workspace":
        """
        Create a workspace from environment variables.

        Environment variables:
            GITHUB_TOKEN: GitHub access token (required)
            WORKSPACE_DIR: Workspace root directory (optional, default: .workspace)
            GITHUB_API_URL: API base URL (optional, default: https://api.github.com)

        Raises:
            ConfigurationError: If GITHUB_TOKEN is not set
        """
        token = os.environ.get("GITHUB_TOKEN")
        if not token:
            raise ConfigurationError("GITHUB_TOKEN environment variable not set")

        directory = os.environ.get("WORKSPACE_DIR", ".workspace")
        base_url = os.environ.get("GITHUB_API_URL")
        github = GitHubConnection(token, base_url=base_url) if base_url else None
        return cls(token, directory, github=github)

    @property
    def github(self) -> GitHubConnection:
        return self._github

    @property
    def repos(self) -> tuple[WorkspaceRepo, ...]:
        """The initialized repositories (empty before init)."""
        return tuple(self._initialized_repos or ())

    async def close(self) -> None:
        """Close the GitHub connection."""
        await self._github.close()

    async def __aenter__(self) -> "Workspace":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _determine_github_repos(
        self, patterns: list[str], excludes: list[str] | None = None
    ) -> list[ResolvedRepository]:
        """
        Expand the include patterns, drop the excludes and resolve what is
        left. Repos that fail to resolve are logged and left out.
        """
        excluded = {name.lower() for name in excludes or []}

        references = await self._github.expand_patterns(patterns)
        references = [
            ref for ref in references if ref.full_name.lower() not in excluded
        ]

        async def resolve(
            reference: RepositoryReference,
        ) -> _Resolved | ResolutionFailure:
            try:
                return _Resolved(await self._github.resolve(reference))
            except Exception as e:
                return ResolutionFailure(reference=reference, error=e)

        outcomes = await asyncio.gather(*(resolve(ref) for ref in references))

        resolved: list[ResolvedRepository] = []
        for outcome in outcomes:
            if isinstance(outcome, ResolutionFailure):
                logger.warning(
                    "Repo not found: %s (%s)", outcome.reference.full_name, outcome.error
                )
                self.resolution_failures.append(outcome)
            else:
                resolved.append(outcome.repo)
        return resolved

    def _open_workspace_repo(self, repo: ResolvedRepository) -> WorkspaceRepo:
        session_dir = self.dir / repo.name
        return WorkspaceRepo(
            dir=session_dir,
            git=self._session_factory(session_dir),
            github=repo,
        )

    def _open_workspace_repos(
        self, repos: list[ResolvedRepository]
    ) -> list[WorkspaceRepo]:
        """
        Open a session for each repo. Every repo gets its own folder: the
        first repo to claim a (case-insensitive) name keeps it, later ones
        are recorded in ``resolution_failures`` and left out.
        """
        claimed: dict[str, ResolvedRepository] = {}
        opened: list[WorkspaceRepo] = []
        for repo in repos:
            first = claimed.setdefault(repo.name.lower(), repo)
            if first is not repo:
                error = DirectoryConflictError(
                    repo.full_name, str(self.dir / repo.name), first.full_name
                )
                logger.warning("Skipping %s: %s", repo.full_name, error.message)
                reference = RepositoryReference(
                    owner=repo.owner,
                    name=repo.name,
                    full_name=repo.full_name,
                    ref=repo.ref,
                )
                self.resolution_failures.append(
                    ResolutionFailure(reference=reference, error=error)
                )
                continue
            opened.append(self._open_workspace_repo(repo))
        return opened

    async def _prepare_workspace_folders(
        self, repos: list[WorkspaceRepo], options: WorkspaceInitOptions
    ) -> None:
        """
        Clean up the workspace folder and remove repo folders left in a bad
        state by earlier runs. Tree removal runs in a worker thread.
        """
        level = logging.INFO if options.verbose else logging.DEBUG

        if options.fresh and self.dir.exists():
            logger.log(level, "Removing workspace folder %s...", self.dir)
            await asyncio.to_thread(shutil.rmtree, self.dir)

        if not self.dir.exists():
            logger.log(level, "Creating workspace folder %s...", self.dir)
            self.dir.mkdir(parents=True)

        # A folder that is not a git repo was most likely populated by bower
        # during a run that was not --fresh; it has to be cloned again.
        for repo in repos:
            if repo.dir.exists() and not repo.git.is_git():
                logger.log(level, "Removing existing folder: %s...", repo.dir)
                if repo.dir.is_dir():
                    await asyncio.to_thread(shutil.rmtree, repo.dir)
                else:
                    repo.dir.unlink()

    async def _clone_or_update_workspace_repos(
        self, repos: list[WorkspaceRepo], options: WorkspaceInitOptions
    ) -> list[WorkspaceRepo]:
        """
        Clone or update every repo concurrently. Returns the repos that
        synchronized; failures are recorded in ``sync_failures``.
        """
        level = logging.INFO if options.verbose else logging.DEBUG
        logger.log(level, "Synchronizing %d repos...", len(repos))

        results = await asyncio.gather(
            *(
                self._git_limiter.schedule(clone_or_update_workspace_repo, repo)
                for repo in repos
            ),
            return_exceptions=True,
        )

        synced: list[WorkspaceRepo] = []
        for repo, result in zip(repos, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Could not synchronize %s: %s", repo.github.full_name, result
                )
                self.sync_failures.append(SyncFailure(repo=repo, error=result))
            elif isinstance(result, BaseException):
                raise result
            else:
                synced.append(repo)
        return synced

    async def _configure_bower_workspace(self, repos: list[WorkspaceRepo]) -> None:
        """
        Write a .bowerrc making the workspace root Bower's install directory,
        and a bower.json depending on everything the workspace repos depend
        on, with each workspace repo pinned to its own local clone.
        """
        config = merged_bower_config_from_repos(repos)
        pinned: dict[str, str] = {}
        for repo in repos:
            sha = await repo.git.get_head_sha()
            pinned[repo.github.name] = f"./{repo.github.name}#{sha}"
        self._bower.write_workspace_config(config, pinned)

    async def _install_workspace_dependencies(self) -> None:
        await self._bower.install()

    def _init_validate(self) -> None:
        """Validate the workspace and environment before running. Raise if bad."""
        if self._initialized_repos is not None or self._initializing:
            raise AlreadyInitializedError()
        for tool in (GIT_COMMAND, self._bower.command):
            if not check_command(tool):
                raise MissingDependencyError(tool)

    async def init(
        self,
        include: list[str],
        exclude: list[str] | None = None,
        options: WorkspaceInitOptions | None = None,
        *,
        fresh: bool = False,
        verbose: bool = False,
    ) -> list[WorkspaceRepo]:
        """
        Initialize the workspace. This is the driver of all initialization
        and setup logic.

        Args:
            include: Repo patterns (``owner/name``, ``owner/name#ref``, ``owner/*``)
            exclude: Full names to leave out, compared case-insensitively
            options: Init options; overrides ``fresh``/``verbose`` when given
            fresh: Remove the workspace folder before synchronizing
            verbose: Log progress at INFO instead of DEBUG

        Returns:
            The synchronized workspace repos

        Raises:
            AlreadyInitializedError: If init has been called before
            MissingDependencyError: If git or bower is not installed
            CommandFailedError: If writing the manifest or bower install fails
        """
        self._init_validate()
        self._initializing = True
        if options is None:
            options = WorkspaceInitOptions(fresh=fresh, verbose=verbose)

        github_repos = await self._determine_github_repos(include, exclude)
        workspace_repos = self._open_workspace_repos(github_repos)

        # Must finish before any clone starts, it may delete clone targets.
        await self._prepare_workspace_folders(workspace_repos, options)

        workspace_repos = await self._clone_or_update_workspace_repos(
            workspace_repos, options
        )

        await self._configure_bower_workspace(workspace_repos)
        await self._install_workspace_dependencies()

        self._initialized_repos = workspace_repos
        self._initializing = False
        return list(self._initialized_repos)

    async def run(
        self, fn: Callable[[WorkspaceRepo], Awaitable[Any] | Any]
    ) -> RunResult:
        """
        Run some function of work over each workspace repo, one at a time,
        collecting the successes and failures of each run.

        Args:
            fn: Called with each WorkspaceRepo; may be sync or async

        Returns:
            RunResult, which also unpacks as ``(succeeded, failed)``

        Raises:
            NotInitializedError: If init() has not completed
        """
        if self._initialized_repos is None:
            raise NotInitializedError()

        result = RunResult()
        for workspace_repo in self._initialized_repos:
            try:
                outcome = fn(workspace_repo)
                if inspect.isawaitable(outcome):
                    await outcome
                result.succeeded.append(workspace_repo)
            except Exception as e:
                result.failed[workspace_repo] = e
        return result
