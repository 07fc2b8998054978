"""Async Branches resource client."""

import logging
from typing import TYPE_CHECKING
from urllib.parse import quote

from voicecommit.exceptions import ApiError
from voicecommit.types.repos import Repository

if TYPE_CHECKING:
    from voicecommit.transport import AsyncHTTPTransport

logger = logging.getLogger(__name__)


class BranchesClient:
    """Async client for branch lookups and ref creation."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        self.transport = transport

    async def get_sha(self, repo: Repository, branch: str) -> str:
        """
        Get the tip commit SHA of a branch.

        Raises:
            ApiError: If the branch cannot be read
        """
        response = await self.transport.request(
            method="GET",
            path=f"/repos/{repo.full_name}/branches/{quote(branch, safe='')}",
        )
        return response["commit"]["sha"]

    async def create(self, repo: Repository, new_name: str, from_name: str | None = None) -> None:
        """
        Create ``refs/heads/<new_name>`` at the tip of ``from_name``.

        A branch that already exists is treated as success and used as-is.

        Args:
            repo: Target repository
            new_name: Name of the branch to create
            from_name: Source branch (default: the repository default branch)
        """
        source = from_name or repo.default_branch
        sha = await self.get_sha(repo, source)

        try:
            await self.transport.request(
                method="POST",
                path=f"/repos/{repo.full_name}/git/refs",
                body={"ref": f"refs/heads/{new_name}", "sha": sha},
            )
        except ApiError as e:
            if e.status_code == 422 and "already exists" in str(e.body).lower():
                logger.info("Branch %s already exists in %s", new_name, repo.full_name)
                return
            raise

        logger.info("Created branch %s from %s in %s", new_name, source, repo.full_name)
