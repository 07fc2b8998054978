"""Cross-device transport contract consumed by the sync channel."""

from collections.abc import Callable
from typing import Any, Protocol

from voicecommit.types.sync import SyncEvent

EventHandler = Callable[[SyncEvent], None]


class PeerTransport(Protocol):
    """
    Link to the paired process.

    Implementations raise SyncError (or OSError) when a delivery cannot be
    attempted, and report inbound traffic through the registered handler,
    one event at a time in arrival order.
    """

    @property
    def is_reachable(self) -> bool:
        """Whether live messages can currently be delivered."""

    async def send_message(self, payload: dict[str, Any]) -> dict[str, Any] | None:
        """Live delivery. Returns the peer's reply, or None if it sent none."""

    def update_context(self, payload: dict[str, Any]) -> None:
        """Durable delivery. Only the most recent context survives."""

    def set_event_handler(self, handler: EventHandler | None) -> None:
        """Register the single consumer of inbound events."""
