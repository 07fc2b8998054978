"""Authentication token model."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class TokenKind(str, Enum):
    """Kind of GitHub token."""

    CLASSIC = "classic"
    FINE_GRAINED = "fine-grained"


@dataclass(frozen=True)
class AuthToken:
    """
    A GitHub access token.

    Usable only while ``expires_at`` is absent or in the future. The process
    that authenticated owns it; the peer holds a cached copy.
    """

    value: str
    token_kind: TokenKind = TokenKind.CLASSIC
    issued_scope: str | None = None
    expires_at: datetime | None = None

    @classmethod
    def from_value(cls, value: str, expires_at: datetime | None = None) -> "AuthToken":
        """Build a token, inferring its kind from the GitHub prefix."""
        kind = TokenKind.FINE_GRAINED if value.startswith("github_pat_") else TokenKind.CLASSIC
        return cls(value=value, token_kind=kind, expires_at=expires_at)

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        current = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return current >= expires_at

    def is_usable(self, now: datetime | None = None) -> bool:
        return bool(self.value) and not self.is_expired(now)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the OAuth field names."""
        return {
            "access_token": self.value,
            "token_type": self.token_kind.value,
            "scope": self.issued_scope,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthToken":
        expires_raw = data.get("expires_at")
        return cls(
            value=data["access_token"],
            token_kind=TokenKind(data.get("token_type", TokenKind.CLASSIC.value)),
            issued_scope=data.get("scope"),
            expires_at=datetime.fromisoformat(expires_raw) if expires_raw else None,
        )

    def __repr__(self) -> str:
        # Keep the secret out of reprs and tracebacks
        return f"AuthToken(token_kind={self.token_kind.value!r}, expires_at={self.expires_at!r})"
