"""
VoiceCommit GitHub client.

The repository mutation engine: lists and creates repositories, creates
branches and commits generated files through the GitHub REST API.
"""

import os
from collections.abc import Sequence
from typing import Any

import httpx

from voicecommit.clients import BranchesClient, ContentsClient, ReposClient
from voicecommit.exceptions import ConfigurationError
from voicecommit.transport import AsyncHTTPTransport
from voicecommit.types.auth import AuthToken
from voicecommit.types.changes import CommitRecord, FileChange
from voicecommit.types.repos import Repository


class GitHubClient:
    """
    Async client for the GitHub REST API.

    Aggregates the resource clients and holds the current access token.

    Example:
        ```python
        import asyncio
        from voicecommit import AuthToken, FileChange, GitHubClient

        async def main():
            async with GitHubClient(token=AuthToken.from_value("ghp_...")) as github:
                repo = await github.repos.get("octocat/hello-world")
                await github.commit_files(
                    repo, [FileChange("notes.md", "# Notes")], "Add notes"
                )

        asyncio.run(main())
        ```
    """

    DEFAULT_BASE_URL = "https://api.github.com"
    DEFAULT_USER_AGENT = "voicecommit-app"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        token: AuthToken | None = None,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the GitHub client.

        Args:
            token: Access token (optional; set later with set_token)
            base_url: Base URL for API requests (default: https://api.github.com)
            user_agent: Client identifier header value
            timeout: Request timeout in seconds (default: 30.0)
            http_transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url
        self.timeout = timeout

        self._transport = AsyncHTTPTransport(
            base_url=base_url,
            user_agent=user_agent,
            timeout=timeout,
            token=token,
            http_transport=http_transport,
        )

        self.repos = ReposClient(self._transport)
        self.branches = BranchesClient(self._transport)
        self.contents = ContentsClient(self._transport)

    @classmethod
    def from_env(
        cls,
        token: AuthToken | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> "GitHubClient":
        """
        Create a client from environment variables.

        Environment variables:
            VOICECOMMIT_GITHUB_API_URL: Base URL (optional, default: https://api.github.com)
            VOICECOMMIT_USER_AGENT: Client identifier (optional, default: voicecommit-app)
            VOICECOMMIT_REQUEST_TIMEOUT: Timeout in seconds (optional, default: 30)
            VOICECOMMIT_GITHUB_TOKEN: Initial token (optional)

        Raises:
            ConfigurationError: If the timeout is not a positive number
        """
        base_url = os.environ.get("VOICECOMMIT_GITHUB_API_URL", cls.DEFAULT_BASE_URL)
        user_agent = os.environ.get("VOICECOMMIT_USER_AGENT", cls.DEFAULT_USER_AGENT)
        timeout_raw = os.environ.get("VOICECOMMIT_REQUEST_TIMEOUT", str(cls.DEFAULT_TIMEOUT))
        try:
            timeout = float(timeout_raw)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid VOICECOMMIT_REQUEST_TIMEOUT: {timeout_raw!r}"
            ) from e
        if timeout <= 0:
            raise ConfigurationError("VOICECOMMIT_REQUEST_TIMEOUT must be positive")

        env_token = os.environ.get("VOICECOMMIT_GITHUB_TOKEN")
        if token is None and env_token:
            token = AuthToken.from_value(env_token)

        return cls(
            token=token,
            base_url=base_url,
            user_agent=user_agent,
            timeout=timeout,
            http_transport=http_transport,
        )

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying async HTTP transport (for advanced use cases)."""
        return self._transport

    @property
    def is_authenticated(self) -> bool:
        token = self._transport.token
        return token is not None and token.is_usable()

    def set_token(self, token: AuthToken) -> None:
        self._transport.set_token(token)

    def clear_token(self) -> None:
        self._transport.set_token(None)

    async def get_authenticated_user(self) -> str:
        """
        Validate the current token.

        Returns:
            The login of the token owner

        Raises:
            NotAuthenticatedError: If the token is missing, expired or rejected
        """
        response = await self._transport.request(method="GET", path="/user")
        return response["login"]

    async def create_branch(
        self, repo: Repository, new_name: str, from_name: str | None = None
    ) -> None:
        await self.branches.create(repo, new_name, from_name)

    async def commit_file(
        self,
        repo: Repository,
        path: str,
        content: str,
        message: str,
        branch: str | None = None,
    ) -> CommitRecord:
        return await self.contents.commit_file(repo, path, content, message, branch)

    async def commit_files(
        self,
        repo: Repository,
        files: Sequence[FileChange],
        message: str,
        branch: str | None = None,
    ) -> list[CommitRecord]:
        return await self.contents.commit_files(repo, files, message, branch)

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
