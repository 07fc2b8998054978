"""Async Repositories resource client."""

from typing import TYPE_CHECKING, Any

from voicecommit.types.repos import Repository

if TYPE_CHECKING:
    from voicecommit.transport import AsyncHTTPTransport


class ReposClient:
    """Async client for repository-related operations."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the repos client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def list(self, sort: str = "updated", per_page: int = 50) -> list[Repository]:
        """
        List repositories the authenticated user can access.

        Returns:
            Up to ``per_page`` repositories, most recently updated first
        """
        response = await self.transport.request(
            method="GET",
            path="/user/repos",
            params={"sort": sort, "per_page": per_page},
        )
        return [Repository.from_api(repo) for repo in response or []]

    async def get(self, full_name: str) -> Repository:
        """
        Get repository information.

        Args:
            full_name: "owner/name"
        """
        response = await self.transport.request(method="GET", path=f"/repos/{full_name}")
        return Repository.from_api(response)

    async def create(
        self,
        name: str,
        description: str | None = None,
        private: bool = False,
        auto_init: bool = True,
    ) -> Repository:
        """
        Create a new repository for the authenticated user.

        Args:
            name: Repository name
            description: Optional repository description
            private: Create as private repository
            auto_init: Create an initial commit so the default branch exists

        Returns:
            The created Repository
        """
        body: dict[str, Any] = {"name": name, "private": private, "auto_init": auto_init}
        if description:
            body["description"] = description

        response = await self.transport.request(method="POST", path="/user/repos", body=body)
        return Repository.from_api(response)
