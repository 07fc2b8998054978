"""In-process peer link, used by tests and the example walkthrough."""

import asyncio
import logging
from typing import Any

from voicecommit.exceptions import SyncError
from voicecommit.sync.peer import EventHandler
from voicecommit.types.sync import (
    ContextReceived,
    MessageReceived,
    PeerReachabilityChanged,
    SyncEvent,
)

logger = logging.getLogger("voicecommit.sync")


class LoopbackEndpoint:
    """One side of a LoopbackLink. Implements the PeerTransport protocol."""

    def __init__(self, link: "LoopbackLink", name: str) -> None:
        self.link = link
        self.name = name
        self._handler: EventHandler | None = None
        self.sent_messages: list[dict[str, Any]] = []
        self.context_writes: list[dict[str, Any]] = []

    @property
    def peer(self) -> "LoopbackEndpoint":
        return self.link.satellite if self is self.link.primary else self.link.primary

    @property
    def is_reachable(self) -> bool:
        return self.link.reachable

    def set_event_handler(self, handler: EventHandler | None) -> None:
        self._handler = handler

    async def send_message(self, payload: dict[str, Any]) -> dict[str, Any] | None:
        if self.link.fail_live:
            raise SyncError("Live link failure")
        if not self.link.reachable:
            raise SyncError("Peer not reachable")

        self.sent_messages.append(dict(payload))
        replies: list[dict[str, Any]] = []
        self.peer.emit(MessageReceived(payload=dict(payload), reply=replies.append))
        if self.link.reply_delay:
            await asyncio.sleep(self.link.reply_delay)
        return replies[0] if replies else None

    def update_context(self, payload: dict[str, Any]) -> None:
        self.context_writes.append(dict(payload))
        if self.link.reachable:
            self.peer.emit(ContextReceived(payload=dict(payload)))
        else:
            # Overwrite: only the latest context reaches the peer
            self.link.pending[self.peer.name] = dict(payload)

    def emit(self, event: SyncEvent) -> None:
        if self._handler is None:
            logger.debug("%s has no event handler; dropped %s", self.name, type(event).__name__)
            return
        self._handler(event)


class LoopbackLink:
    """
    A pair of connected in-memory endpoints.

    Args:
        reachable: Initial reachability
        reply_delay: Seconds before a live reply is returned to the sender
            (the message itself is delivered immediately)
    """

    def __init__(self, reachable: bool = True, reply_delay: float = 0.0) -> None:
        self.reachable = reachable
        self.reply_delay = reply_delay
        self.fail_live = False
        self.pending: dict[str, dict[str, Any]] = {}
        self.primary = LoopbackEndpoint(self, "primary")
        self.satellite = LoopbackEndpoint(self, "satellite")

    def set_reachable(self, reachable: bool) -> None:
        """Change reachability. Held contexts are flushed on reconnection."""
        if reachable == self.reachable:
            return
        self.reachable = reachable
        if reachable:
            for endpoint in (self.primary, self.satellite):
                context = self.pending.pop(endpoint.name, None)
                if context is not None:
                    endpoint.emit(ContextReceived(payload=context))
        for endpoint in (self.primary, self.satellite):
            endpoint.emit(PeerReachabilityChanged(reachable=reachable))
