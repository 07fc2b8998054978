"""
Pytest fixtures for VoiceCommit testing.

Provides a fake GitHub API, a wired GitHub client, a loopback sync link and
sample data.
"""

import asyncio
from collections.abc import Generator

import pytest

from voicecommit.client import GitHubClient
from voicecommit.credentials import MemoryCredentialStore
from voicecommit.sync.memory import LoopbackLink
from voicecommit.testing.mock import FakeGitHubAPI
from voicecommit.types.auth import AuthToken
from voicecommit.types.changes import CodeGenerationResult, FileChange
from voicecommit.types.repos import Repository

SAMPLE_TOKEN = "ghp_" + "a1b2c3d4e5" * 4


def create_mock_repository(
    full_name: str = "octocat/voice-demo",
    repo_id: int = 1001,
    default_branch: str = "main",
) -> Repository:
    """Create a Repository without going through the API."""
    return Repository(
        repo_id=repo_id,
        name=full_name.split("/", 1)[1],
        full_name=full_name,
        default_branch=default_branch,
        private=False,
        html_url=f"https://github.com/{full_name}",
        clone_url=f"https://github.com/{full_name}.git",
    )


def create_mock_result(paths: tuple[str, ...] = ("index.html", "app.js")) -> CodeGenerationResult:
    """Create a CodeGenerationResult with one small file per path."""
    return CodeGenerationResult(
        files=tuple(FileChange(path=path, content=f"// {path}\n") for path in paths),
        commit_message="Generate code via voice request: test",
        summary=f"Generated {len(paths)} files from voice request",
    )


# ============================================================================
# GitHub Fixtures
# ============================================================================


@pytest.fixture
def fake_github() -> FakeGitHubAPI:
    """
    Provide an empty FakeGitHubAPI.

    Example:
        ```python
        def test_my_feature(fake_github):
            fake_github.add_repository("octocat/demo")
            fake_github.configure_error("PUT", "/contents/", 500)
        ```
    """
    return FakeGitHubAPI()


@pytest.fixture
def sample_repository(fake_github: FakeGitHubAPI) -> Repository:
    """Provide a repository registered with the fake API."""
    return Repository.from_api(fake_github.add_repository("octocat/voice-demo"))


@pytest.fixture
def auth_token() -> AuthToken:
    return AuthToken.from_value(SAMPLE_TOKEN)


@pytest.fixture
def github_client(
    fake_github: FakeGitHubAPI, auth_token: AuthToken
) -> Generator[GitHubClient, None, None]:
    """Provide an authenticated GitHubClient backed by the fake API."""
    client = GitHubClient(token=auth_token, http_transport=fake_github.transport())
    yield client
    asyncio.run(client.close())


# ============================================================================
# Sync Fixtures
# ============================================================================


@pytest.fixture
def loopback_link() -> LoopbackLink:
    """Provide a reachable LoopbackLink."""
    return LoopbackLink()


@pytest.fixture
def credential_store() -> MemoryCredentialStore:
    return MemoryCredentialStore()


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_result() -> CodeGenerationResult:
    """Provide a two-file CodeGenerationResult."""
    return create_mock_result()
