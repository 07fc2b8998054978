"""
Tests for VoiceCommit data models.

Feature: voicecommit
"""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from voicecommit.types import (
    AuthToken,
    CodeGenerationResult,
    CommitRecord,
    FileChange,
    Repository,
    RequestStatus,
    StatusKind,
    TokenKind,
    VoiceRequest,
)
from voicecommit.types.requests import (
    COMMITTING,
    COMPLETED,
    PROCESSING,
    REVIEWING,
    TRANSCRIBING,
)

ALL_STATUSES = [
    TRANSCRIBING,
    PROCESSING,
    REVIEWING,
    COMMITTING,
    COMPLETED,
    RequestStatus.failed("boom"),
]


# ============================================================================
# AuthToken
# ============================================================================


def test_token_kind_inferred_from_prefix() -> None:
    assert AuthToken.from_value("github_pat_abc").token_kind is TokenKind.FINE_GRAINED
    assert AuthToken.from_value("ghp_abc").token_kind is TokenKind.CLASSIC


def test_token_usable_until_expiry() -> None:
    now = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
    token = AuthToken.from_value("ghp_abc", expires_at=now + timedelta(hours=1))

    assert token.is_usable(now)
    assert not token.is_usable(now + timedelta(hours=1))
    assert AuthToken.from_value("ghp_abc").is_usable()
    assert not AuthToken.from_value("").is_usable()


def test_naive_expiry_is_treated_as_utc() -> None:
    token = AuthToken.from_value("ghp_abc", expires_at=datetime(2000, 1, 1))
    assert token.is_expired()


def test_token_dict_round_trip() -> None:
    token = AuthToken(
        value="github_pat_xyz",
        token_kind=TokenKind.FINE_GRAINED,
        issued_scope="repo",
        expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
    )
    data = token.to_dict()

    assert data["access_token"] == "github_pat_xyz"
    assert data["token_type"] == "fine-grained"
    assert AuthToken.from_dict(data) == token


def test_token_repr_hides_value() -> None:
    assert "ghp_secret" not in repr(AuthToken.from_value("ghp_secretvalue"))


# ============================================================================
# Repository
# ============================================================================


def test_repository_identity_is_numeric_id() -> None:
    data = {"id": 7, "name": "demo", "full_name": "octocat/demo"}
    renamed = {"id": 7, "name": "renamed", "full_name": "octocat/renamed"}

    assert Repository.from_api(data) == Repository.from_api(renamed)
    assert len({Repository.from_api(data), Repository.from_api(renamed)}) == 1
    assert Repository.from_api(data).default_branch == "main"


# ============================================================================
# FileChange / CodeGenerationResult / CommitRecord
# ============================================================================


@pytest.mark.parametrize("path", ["", "/etc/passwd", "https://example.com/a.js"])
def test_file_change_rejects_non_relative_paths(path: str) -> None:
    with pytest.raises(ValueError):
        FileChange(path=path, content="x")


def test_generation_result_requires_files() -> None:
    with pytest.raises(ValueError):
        CodeGenerationResult(files=(), commit_message="m", summary="s")


def test_commit_record_from_api() -> None:
    record = CommitRecord.from_api(
        "a.txt",
        {
            "content": {"path": "a.txt", "sha": "blob1", "html_url": "https://x/a.txt"},
            "commit": {"sha": "c1", "author": {"name": "Mona", "email": "mona@x.dev"}},
        },
    )
    assert record.blob_sha == "blob1"
    assert record.commit_sha == "c1"
    assert record.html_url == "https://x/a.txt"
    assert record.author == "Mona <mona@x.dev>"


# ============================================================================
# RequestStatus / VoiceRequest
# ============================================================================


@given(
    current=st.sampled_from(ALL_STATUSES),
    reason=st.text(min_size=1, max_size=20),
)
@settings(max_examples=100)
def test_property_failed_reachable_from_any_non_terminal(
    current: RequestStatus, reason: str
) -> None:
    """
    Property: ``failed`` is reachable from every non-terminal status and
    nothing leaves a terminal status.
    """
    target = RequestStatus.failed(reason)
    assert current.can_transition_to(target) == (not current.is_terminal)
    if current.is_terminal:
        assert not any(current.can_transition_to(other) for other in ALL_STATUSES)


@given(
    a=st.sampled_from([TRANSCRIBING, PROCESSING, REVIEWING, COMMITTING, COMPLETED]),
    b=st.sampled_from([TRANSCRIBING, PROCESSING, REVIEWING, COMMITTING, COMPLETED]),
)
@settings(max_examples=100)
def test_property_progression_is_forward_only(a: RequestStatus, b: RequestStatus) -> None:
    """
    Property: Only forward moves are allowed, plus reviewing -> transcribing.
    """
    order = [TRANSCRIBING, PROCESSING, REVIEWING, COMMITTING, COMPLETED]
    expected = a != COMPLETED and (
        order.index(b) > order.index(a) or (a == REVIEWING and b == TRANSCRIBING)
    )
    assert a.can_transition_to(b) == expected


def test_voice_request_lifecycle() -> None:
    request = VoiceRequest(transcript_text="build me a todo app", target_repository_id=1)
    request.advance(PROCESSING)
    request.advance(REVIEWING)
    request.advance(TRANSCRIBING)
    request.advance(PROCESSING)
    request.advance(REVIEWING)
    request.advance(COMMITTING)
    request.advance(COMPLETED)

    assert request.status.is_terminal
    with pytest.raises(ValueError):
        request.advance(RequestStatus.failed("late"))


def test_voice_request_ids_are_unique() -> None:
    ids = {VoiceRequest(transcript_text="x").id for _ in range(50)}
    assert len(ids) == 50


def test_status_display_name() -> None:
    assert RequestStatus.failed("network down").display_name == "Failed: network down"
    assert REVIEWING.display_name == "Reviewing"
    assert REVIEWING.kind is StatusKind.REVIEWING
