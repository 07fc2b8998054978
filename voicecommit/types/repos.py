"""Repository-related data models."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Repository:
    """Repository information. Identity is ``repo_id``."""

    repo_id: int
    name: str
    full_name: str  # "owner/name"
    default_branch: str
    private: bool
    html_url: str
    clone_url: str

    @property
    def owner(self) -> str:
        return self.full_name.split("/", 1)[0]

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Repository":
        """Build a Repository from a GitHub REST payload."""
        return cls(
            repo_id=data["id"],
            name=data["name"],
            full_name=data["full_name"],
            default_branch=data.get("default_branch") or "main",
            private=bool(data.get("private", False)),
            html_url=data.get("html_url", ""),
            clone_url=data.get("clone_url", ""),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Repository):
            return NotImplemented
        return self.repo_id == other.repo_id

    def __hash__(self) -> int:
        return hash(self.repo_id)
