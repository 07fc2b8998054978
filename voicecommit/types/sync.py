"""Messages and events exchanged between paired devices."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class TokenUpdate:
    """The sender authenticated; replace the cached token."""

    value: str
    owner_login: str


@dataclass(frozen=True)
class TokenClear:
    """The sender signed out; evict the cached token."""


@dataclass(frozen=True)
class TokenRequest:
    """Ask the peer for its current token."""


@dataclass(frozen=True)
class TokenReply:
    """Answer to a TokenRequest. ``value`` is None when the peer has no token."""

    value: str | None
    owner_login: str | None = None


@dataclass(frozen=True)
class ApiKeyUpdate:
    """Replace the cached generative backend API key (None clears it)."""

    value: str | None


SyncMessage = Union[TokenUpdate, TokenClear, TokenRequest, TokenReply, ApiKeyUpdate]


# Transport events, consumed one at a time by the sync channel


@dataclass(frozen=True)
class PeerReachabilityChanged:
    reachable: bool


@dataclass(frozen=True)
class MessageReceived:
    payload: dict[str, Any]
    reply: Callable[[dict[str, Any]], None] | None = field(default=None, compare=False)


@dataclass(frozen=True)
class ContextReceived:
    payload: dict[str, Any]


SyncEvent = Union[PeerReachabilityChanged, MessageReceived, ContextReceived]
