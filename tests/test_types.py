"""
Property-based tests for repository references and metadata.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from gitworkspace.exceptions import MalformedPatternError
from gitworkspace.testing import create_mock_repository
from gitworkspace.types import (
    CachedRepository,
    RepositoryReference,
    ResolvedRepository,
    RunResult,
    parse_repository_reference,
)

segment_strategy = st.text(
    min_size=1,
    max_size=40,
    alphabet=st.characters(whitelist_categories=("L", "N"), whitelist_characters="-_."),
)


@given(owner=segment_strategy, name=segment_strategy)
@settings(max_examples=100)
def test_parse_owner_name(owner: str, name: str) -> None:
    """owner/name parses with full_name == owner/name and no ref."""
    reference = parse_repository_reference(f"{owner}/{name}")

    assert reference.owner == owner
    assert reference.name == name
    assert reference.full_name == f"{owner}/{name}"
    assert reference.ref is None


@given(owner=segment_strategy, name=segment_strategy, ref=segment_strategy)
@settings(max_examples=100)
def test_parse_owner_name_ref(owner: str, name: str, ref: str) -> None:
    """owner/name#ref parses with the ref set and excluded from full_name."""
    reference = parse_repository_reference(f"{owner}/{name}#{ref}")

    assert reference.full_name == f"{owner}/{name}"
    assert reference.ref == ref


@pytest.mark.parametrize(
    "pattern",
    ["polymer", "Polymer/polymer/extra", "Polymer/polymer#a#b", "Polymer#master"],
)
def test_parse_malformed_patterns(pattern: str) -> None:
    with pytest.raises(MalformedPatternError) as exc_info:
        parse_repository_reference(pattern)

    assert exc_info.value.pattern == pattern
    assert exc_info.value.code == "MALFORMED_PATTERN"


def test_parse_empty_ref_is_no_ref() -> None:
    assert parse_repository_reference("Polymer/polymer#").ref is None


def test_reference_is_immutable() -> None:
    reference = RepositoryReference("Polymer", "polymer", "Polymer/polymer")
    with pytest.raises(AttributeError):
        reference.ref = "master"  # type: ignore[misc]


def test_cached_repository_from_api() -> None:
    payload = create_mock_repository("Polymer", "polymer", default_branch="main")

    repo = CachedRepository.from_api(payload)

    assert repo == CachedRepository(
        owner="Polymer",
        name="polymer",
        full_name="Polymer/polymer",
        clone_url="https://github.com/Polymer/polymer.git",
        default_branch="main",
    )


def test_with_ref_applies_requested_or_default_branch() -> None:
    repo = CachedRepository.from_api(create_mock_repository("Polymer", "polymer"))

    pinned = repo.with_ref("2.0-preview")
    default = repo.with_ref(None)

    assert isinstance(pinned, ResolvedRepository)
    assert pinned.ref == "2.0-preview"
    assert default.ref == "master"
    assert pinned.clone_url == repo.clone_url


def test_run_result_unpacks() -> None:
    succeeded, failed = RunResult()
    assert succeeded == []
    assert failed == {}
