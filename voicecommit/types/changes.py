"""File change, generation result and commit record models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FileOperation(str, Enum):
    """Operation applied to a file path."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class FileChange:
    """
    A single file in a generated change set.

    ``path`` is relative to the repository root: no URL scheme and no
    leading slash.
    """

    path: str
    content: str
    operation: FileOperation = FileOperation.CREATE

    def __post_init__(self) -> None:
        if not self.path or self.path.startswith("/") or "://" in self.path:
            raise ValueError(f"File path must be relative to the repository root: {self.path!r}")


@dataclass(frozen=True)
class CodeGenerationResult:
    """Files and commit metadata produced for one voice request."""

    files: tuple[FileChange, ...]
    commit_message: str
    summary: str
    branch_name: str | None = None

    def __post_init__(self) -> None:
        if not self.files:
            raise ValueError("A code generation result must contain at least one file")

    @property
    def paths(self) -> list[str]:
        return [change.path for change in self.files]


@dataclass(frozen=True)
class CommitRecord:
    """Confirmation of one file pushed to the remote."""

    path: str
    blob_sha: str
    commit_sha: str
    html_url: str
    author: str

    @classmethod
    def from_api(cls, path: str, data: dict[str, Any]) -> "CommitRecord":
        """Build a record from a contents PUT response."""
        content = data.get("content") or {}
        commit = data.get("commit") or {}
        author = commit.get("author") or {}
        name = author.get("name", "")
        email = author.get("email")
        return cls(
            path=content.get("path", path),
            blob_sha=content.get("sha", ""),
            commit_sha=commit.get("sha", ""),
            html_url=content.get("html_url") or commit.get("html_url", ""),
            author=f"{name} <{email}>" if email else name,
        )
