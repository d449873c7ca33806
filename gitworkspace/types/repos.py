"""Repository-related data models."""

from dataclasses import dataclass
from typing import Any

from gitworkspace.exceptions import MalformedPatternError


@dataclass(frozen=True)
class RepositoryReference:
    """A requested repository, optionally pinned to a ref."""

    owner: str
    name: str
    full_name: str
    ref: str | None = None


@dataclass(frozen=True)
class CachedRepository:
    """Repository metadata as reported by GitHub. Never carries a ref."""

    owner: str
    name: str
    full_name: str
    clone_url: str
    default_branch: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CachedRepository":
        """Build from a GitHub repository payload."""
        return cls(
            owner=data["owner"]["login"],
            name=data["name"],
            full_name=data["full_name"],
            clone_url=data["clone_url"],
            default_branch=data["default_branch"],
        )

    def with_ref(self, ref: str | None = None) -> "ResolvedRepository":
        """Apply a ref (or the default branch) to produce a resolved repo."""
        return ResolvedRepository(
            owner=self.owner,
            name=self.name,
            full_name=self.full_name,
            clone_url=self.clone_url,
            default_branch=self.default_branch,
            ref=ref or self.default_branch,
        )


@dataclass(frozen=True)
class ResolvedRepository(CachedRepository):
    """Repository metadata plus the concrete ref to check out."""

    ref: str = ""


def parse_repository_reference(pattern: str) -> RepositoryReference:
    """
    Parse a string of the form ``owner/name`` or ``owner/name#ref``.

    Args:
        pattern: Repository pattern string

    Returns:
        RepositoryReference with ``ref`` set only when a ``#ref`` suffix was given

    Raises:
        MalformedPatternError: If the pattern is not exactly owner/name[#ref]
    """
    hash_split = pattern.split("#")
    slash_split = hash_split[0].split("/")

    if len(slash_split) != 2 or len(hash_split) > 2:
        raise MalformedPatternError(pattern)

    owner, name = slash_split
    return RepositoryReference(
        owner=owner,
        name=name,
        full_name=hash_split[0],
        ref=hash_split[1] if len(hash_split) == 2 and hash_split[1] else None,
    )
