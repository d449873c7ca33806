"""
GitHub connection: repository lookup, owner listing and pattern expansion.

All requests go through one RateLimiter so the number of in-flight API calls
stays bounded however many lookups are fanned out.
"""

import asyncio
from typing import Any

import httpx

from gitworkspace.exceptions import HostingAPIError, MalformedPatternError
from gitworkspace.logging import get_logger
from gitworkspace.rate_limiter import DEFAULT_GITHUB_API_CONCURRENCY, RateLimiter
from gitworkspace.transport import AsyncHTTPTransport, RetryConfig
from gitworkspace.types.repos import (
    CachedRepository,
    RepositoryReference,
    ResolvedRepository,
    parse_repository_reference,
)

OWNER_REPOS_PAGE_SIZE = 50

logger = get_logger()


def _public_repos_from_page(page: list[dict[str, Any]]) -> list[CachedRepository]:
    return [
        CachedRepository.from_api(data)
        for data in page
        if not data.get("private")
    ]


class GitHubConnection:
    """
    A minimal GitHub API client acting as the token's user.

    Supports the handful of calls needed to build a workspace: single
    repository lookup, listing an owner's repositories, and expanding
    ``owner/*`` patterns. Repository metadata is cached by full name for the
    lifetime of the connection; refs are applied on the way out and never
    stored.

    Example:
        ```python
        async with GitHubConnection(token) as github:
            refs = await github.expand_patterns(["PolymerElements/*"])
            repo = await github.resolve(refs[0])
            print(repo.clone_url, repo.ref)
        ```
    """

    def __init__(
        self,
        token: str,
        base_url: str = AsyncHTTPTransport.DEFAULT_BASE_URL,
        api_limiter: RateLimiter | None = None,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the connection.

        Args:
            token: GitHub access token
            base_url: API base URL (default: https://api.github.com)
            api_limiter: Limiter bounding concurrent API calls (default: 12)
            retry_config: Retry behavior for the HTTP transport (optional)
            http_transport: Optional httpx transport, used by tests to mount a fake API
        """
        self._cache: dict[str, CachedRepository] = {}
        self._limiter = api_limiter or RateLimiter(DEFAULT_GITHUB_API_CONCURRENCY)
        self._transport = AsyncHTTPTransport(
            token=token,
            base_url=base_url,
            retry_config=retry_config,
            http_transport=http_transport,
            limiter=self._limiter,
        )

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying async HTTP transport."""
        return self._transport

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    def reset_cache(self) -> None:
        """Forget all cached repository metadata."""
        self._cache = {}

    def cached(self, full_name: str) -> CachedRepository | None:
        """Return the cached metadata for ``full_name``, if any."""
        return self._cache.get(full_name)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._transport.close()

    async def __aenter__(self) -> "GitHubConnection":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._transport.get(path, params)

    async def resolve(self, reference: RepositoryReference) -> ResolvedRepository:
        """
        Resolve a reference to full repository metadata with a concrete ref.

        Uses the cache when possible; otherwise looks the repository up on
        GitHub and caches the answer.

        Args:
            reference: The repository to resolve

        Returns:
            ResolvedRepository with ``ref`` set to the requested ref or the default branch

        Raises:
            RepositoryMovedError: If the repository was renamed or transferred
            RepositoryNotFoundError: If the repository does not exist
            HostingAPIError: On other API errors
        """
        cached = self._cache.get(reference.full_name)
        if cached is not None:
            return cached.with_ref(reference.ref)

        try:
            data = await self._get(f"/repos/{reference.owner}/{reference.name}")
        except HostingAPIError as e:
            if e.code == "MOVED_PERMANENTLY":
                logger.warning("Repo %s has moved permanently.", reference.full_name)
            raise

        repo = CachedRepository.from_api(data)
        self._cache[reference.full_name] = repo
        return repo.with_ref(reference.ref)

    get_repo_info = resolve

    async def _list_page(self, kind: str, owner: str, page: int) -> list[dict[str, Any]]:
        response = await self._get(
            f"/{kind}/{owner}/repos",
            {"per_page": OWNER_REPOS_PAGE_SIZE, "page": page},
        )
        return response if isinstance(response, list) else []

    async def list_owner_repositories(self, owner: str) -> list[CachedRepository]:
        """
        List every public repository of ``owner``, an org or a user.

        Tries the organization listing first and falls back to the user
        listing once the org listing fails. Pages are requested until one
        comes back empty; a page holding only private repositories does not
        end the walk. Failures of both listings end the walk quietly,
        returning whatever was collected.

        Args:
            owner: GitHub org or user login

        Returns:
            List of CachedRepository, private repositories excluded
        """
        all_repos: list[CachedRepository] = []
        page = 1
        is_org = True

        while True:
            page_repos: list[dict[str, Any]] = []
            if is_org:
                try:
                    page_repos = await self._list_page("orgs", owner, page)
                except HostingAPIError as e:
                    logger.debug("%s is not an org (%s), trying user", owner, e.message)
                    is_org = False
            if not is_org:
                try:
                    page_repos = await self._list_page("users", owner, page)
                except HostingAPIError as e:
                    logger.warning("Could not list repos for %s: %s", owner, e.message)
                    page_repos = []

            if not page_repos:
                break

            for repo in _public_repos_from_page(page_repos):
                self._cache[repo.full_name] = repo
                all_repos.append(repo)
            page += 1

        return all_repos

    get_owner_repos = list_owner_repositories

    async def expand_patterns(self, patterns: list[str]) -> list[RepositoryReference]:
        """
        Expand repository patterns into concrete references.

        ``owner/name`` and ``owner/name#ref`` are taken as-is. Any pattern
        containing ``*`` expands to every public repository of its owner
        (``PolymerElements/iron-*`` currently yields all of PolymerElements;
        the name part is not used as a filter). Patterns without a ``/`` are
        skipped with a warning.

        Args:
            patterns: Repository patterns

        Returns:
            References de-duplicated by case-insensitive full name, first one wins
        """
        references: dict[str, RepositoryReference] = {}
        wildcard_patterns: list[str] = []

        for pattern in patterns:
            if "/" not in pattern:
                logger.warning(
                    'repo "%s" must be of the GitHub format "owner/repo". Ignoring...',
                    pattern,
                )
                continue
            if "*" in pattern:
                if pattern not in wildcard_patterns:
                    wildcard_patterns.append(pattern)
                continue
            try:
                reference = parse_repository_reference(pattern)
            except MalformedPatternError as e:
                logger.warning("%s. Ignoring...", e.message)
                continue
            references.setdefault(reference.full_name.lower(), reference)

        if not wildcard_patterns:
            return list(references.values())

        async def expand_owner(pattern: str) -> list[RepositoryReference]:
            owner = pattern[: pattern.index("/")].lower()
            name_part = pattern[pattern.index("/") + 1 :].split("#", 1)[0]
            if name_part != "*":
                logger.warning(
                    'Name filter "%s" in "%s" is not applied; '
                    "expanding to every repo owned by %s",
                    name_part,
                    pattern,
                    owner,
                )
            ref = pattern.split("#", 1)[1] if "#" in pattern else None
            owner_repos = await self.list_owner_repositories(owner)
            return [
                RepositoryReference(
                    owner=repo.owner,
                    name=repo.name,
                    full_name=repo.full_name,
                    ref=ref or repo.default_branch,
                )
                for repo in owner_repos
            ]

        expanded = await asyncio.gather(
            *(expand_owner(pattern) for pattern in wildcard_patterns)
        )
        for owner_references in expanded:
            for reference in owner_references:
                references.setdefault(reference.full_name.lower(), reference)

        return list(references.values())
