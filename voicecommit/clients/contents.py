"""Async Contents resource client.

Creates and updates files through the GitHub contents API. Updates are
conditional on the current blob SHA, which is always looked up before a
write so an existing file is never blindly overwritten.
"""

import base64
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING
from urllib.parse import quote

from voicecommit.exceptions import ApiError, RemoteFileNotFoundError
from voicecommit.types.changes import CommitRecord, FileChange, FileOperation
from voicecommit.types.repos import Repository

if TYPE_CHECKING:
    from voicecommit.transport import AsyncHTTPTransport

logger = logging.getLogger(__name__)


def encode_content(content: str) -> str:
    """Encode file content as base64 of its UTF-8 bytes."""
    return base64.b64encode(content.encode("utf-8")).decode("ascii")


def decode_content(encoded: str) -> str:
    """Inverse of :func:`encode_content`. Tolerates the line breaks GitHub inserts."""
    return base64.b64decode("".join(encoded.split())).decode("utf-8")


class ContentsClient:
    """Async client for file create/update operations."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        self.transport = transport

    async def get_sha(self, repo: Repository, path: str, branch: str) -> str:
        """
        Look up the blob SHA of ``path`` on ``branch``.

        Raises:
            RemoteFileNotFoundError: If the file does not exist
        """
        try:
            response = await self.transport.request(
                method="GET",
                path=self._contents_path(repo, path),
                params={"ref": branch},
            )
        except ApiError as e:
            if e.status_code == 404:
                raise RemoteFileNotFoundError(path, branch) from e
            raise
        return response["sha"]

    async def commit_file(
        self,
        repo: Repository,
        path: str,
        content: str,
        message: str,
        branch: str | None = None,
    ) -> CommitRecord:
        """
        Create or update a single file.

        Args:
            repo: Target repository
            path: Repository-relative file path
            content: Full new file content
            message: Commit message, passed through unchanged
            branch: Target branch (default: the repository default branch)

        Returns:
            CommitRecord for the pushed file

        Raises:
            NotAuthenticatedError: If no usable token is set
            ApiError: If the write is rejected
            NetworkError: If the API cannot be reached
        """
        target = branch or repo.default_branch

        try:
            existing_sha: str | None = await self.get_sha(repo, path, target)
        except RemoteFileNotFoundError:
            existing_sha = None

        body = {"message": message, "content": encode_content(content), "branch": target}
        if existing_sha:
            body["sha"] = existing_sha

        response = await self.transport.request(
            method="PUT",
            path=self._contents_path(repo, path),
            body=body,
        )

        record = CommitRecord.from_api(path, response or {})
        logger.info(
            "%s %s on %s@%s (commit %s)",
            "Updated" if existing_sha else "Created",
            path,
            repo.full_name,
            target,
            record.commit_sha[:7],
        )
        return record

    async def commit_files(
        self,
        repo: Repository,
        files: Sequence[FileChange],
        message: str,
        branch: str | None = None,
    ) -> list[CommitRecord]:
        """
        Commit every create/update entry, strictly in order.

        Stops at the first failure; files already written stay committed.
        Delete entries are accepted but not applied.

        Returns:
            One CommitRecord per file written
        """
        records: list[CommitRecord] = []
        for change in files:
            if change.operation is FileOperation.DELETE:
                logger.warning("Skipping delete of %s: deletes are not applied", change.path)
                continue
            records.append(
                await self.commit_file(repo, change.path, change.content, message, branch)
            )
        return records

    @staticmethod
    def _contents_path(repo: Repository, path: str) -> str:
        return f"/repos/{repo.full_name}/contents/{quote(path.lstrip('/'))}"
