"""
Device sync channel.

Keeps the GitHub token (and the generative backend API key) consistent
between the two paired processes. Sends try live delivery first and fall
back to the durable last-value context. Inbound updates replace the local
cache unconditionally (last writer wins).
"""

import asyncio
import logging
import time
from collections.abc import Callable
from enum import Enum
from typing import Any

from voicecommit.credentials import CredentialStore
from voicecommit.exceptions import CredentialStoreError, SyncError
from voicecommit.logging import log_sync_message, truncate_token
from voicecommit.sync import codec
from voicecommit.sync.peer import PeerTransport
from voicecommit.types.auth import AuthToken
from voicecommit.types.sync import (
    ApiKeyUpdate,
    ContextReceived,
    MessageReceived,
    PeerReachabilityChanged,
    SyncEvent,
    SyncMessage,
    TokenClear,
    TokenReply,
    TokenRequest,
    TokenUpdate,
)

logger = logging.getLogger("voicecommit.sync")

TOKEN_ACCOUNT = "github-token"
API_KEY_ACCOUNT = "generation-api-key"

TokenListener = Callable[[AuthToken | None], None]
ApiKeyListener = Callable[[str | None], None]


class DeliveryMode(str, Enum):
    """How an outbound message left the process."""

    LIVE = "live"
    DURABLE = "durable"
    FAILED = "failed"


class DeviceSyncChannel:
    """
    Token and API key cache shared with the paired process.

    The channel is the only writer of the cache. Other components read
    ``token`` and subscribe to changes.

    Args:
        transport: Link to the paired process
        credential_store: Optional store the accepted token is persisted to
        live_timeout: Seconds to wait for a live reply before treating the
            message as fire-and-forget
        auto_request: Ask the peer for its token when it becomes reachable
            and the local cache is empty
    """

    def __init__(
        self,
        transport: PeerTransport,
        credential_store: CredentialStore | None = None,
        live_timeout: float = 5.0,
        auto_request: bool = True,
    ) -> None:
        self.transport = transport
        self.credential_store = credential_store
        self.live_timeout = live_timeout
        self.auto_request = auto_request

        self._token: AuthToken | None = None
        self._owner_login: str | None = None
        self._api_key: str | None = None
        # Latest outbound token and API key state, broadcast whole on durable sends
        self._context: dict[str, Any] = {}
        self._token_listeners: list[TokenListener] = []
        self._api_key_listeners: list[ApiKeyListener] = []
        self._tasks: set[asyncio.Task[Any]] = set()

        transport.set_event_handler(self.handle_event)

    @property
    def token(self) -> AuthToken | None:
        """The cached token, if any."""
        return self._token

    @property
    def owner_login(self) -> str | None:
        return self._owner_login

    @property
    def api_key(self) -> str | None:
        return self._api_key

    def has_usable_token(self) -> bool:
        return self._token is not None and self._token.is_usable()

    def subscribe(self, callback: TokenListener) -> Callable[[], None]:
        """
        Register a callback invoked with the new token after every change.

        Returns:
            A function that removes the callback
        """
        self._token_listeners.append(callback)
        return lambda: self._token_listeners.remove(callback)

    def subscribe_api_key(self, callback: ApiKeyListener) -> Callable[[], None]:
        self._api_key_listeners.append(callback)
        return lambda: self._api_key_listeners.remove(callback)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send_token(self, token: AuthToken, owner_login: str) -> DeliveryMode:
        """
        Adopt a freshly authenticated token and propagate it to the peer.

        Returns:
            The delivery mode that carried the update
        """
        self._apply(TokenUpdate(value=token.value, owner_login=owner_login), token=token)
        return await self._deliver(TokenUpdate(value=token.value, owner_login=owner_login))

    async def clear_token(self) -> DeliveryMode:
        """Evict the local token and tell the peer to do the same."""
        self._apply(TokenClear())
        return await self._deliver(TokenClear())

    async def send_api_key(self, api_key: str | None) -> DeliveryMode:
        self._apply(ApiKeyUpdate(value=api_key))
        return await self._deliver(ApiKeyUpdate(value=api_key))

    async def request_token(self) -> AuthToken | None:
        """
        Ask the peer for its token over the live link.

        A token in the reply is applied like any other update. Delivery
        failures are logged, not raised.

        Returns:
            The token received, or None when the peer had none or could not
            be reached
        """
        if not self.transport.is_reachable:
            logger.info("Peer not reachable; token request skipped")
            return None

        payload = codec.encode_message(TokenRequest())
        log_sync_message("send", codec.ACTION_TOKEN_REQUEST, DeliveryMode.LIVE.value)
        try:
            raw = await asyncio.wait_for(self.transport.send_message(payload), self.live_timeout)
        except asyncio.TimeoutError:
            logger.warning("No reply to token request within %.1fs", self.live_timeout)
            return None
        except (SyncError, OSError) as e:
            logger.warning("Token request failed: %s", e)
            return None

        reply = codec.decode_reply(raw)
        if reply.value is None:
            logger.info("Peer has no token")
            return None

        self._apply(TokenUpdate(value=reply.value, owner_login=reply.owner_login or ""))
        return self._token

    async def _deliver(self, message: SyncMessage) -> DeliveryMode:
        action = codec.action_name(message)
        self._context = codec.encode_context(message, self._context)

        if self.transport.is_reachable:
            try:
                reply = await asyncio.wait_for(
                    self.transport.send_message(codec.encode_message(message)),
                    self.live_timeout,
                )
            except asyncio.TimeoutError:
                # Unacknowledged live sends still count as sent
                logger.info("No reply to %s within %.1fs", action, self.live_timeout)
                log_sync_message("send", action, DeliveryMode.LIVE.value)
                return DeliveryMode.LIVE
            except (SyncError, OSError) as e:
                logger.warning("Live delivery of %s failed (%s); using durable context", action, e)
            else:
                log_sync_message("send", action, DeliveryMode.LIVE.value)
                if reply and reply.get("status") == codec.STATUS_ERROR:
                    logger.warning("Peer rejected %s: %s", action, reply.get("message"))
                return DeliveryMode.LIVE

        return self._send_durable(action)

    def _send_durable(self, action: str) -> DeliveryMode:
        self._context["timestamp"] = time.time()
        try:
            self.transport.update_context(dict(self._context))
        except (SyncError, OSError) as e:
            logger.warning("Durable delivery of %s failed: %s", action, e)
            return DeliveryMode.FAILED

        log_sync_message("send", action, DeliveryMode.DURABLE.value)
        return DeliveryMode.DURABLE

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def handle_event(self, event: SyncEvent) -> None:
        """
        Single entry point for transport events.

        Runs to completion without suspending, so events are applied one at
        a time in arrival order.
        """
        if isinstance(event, PeerReachabilityChanged):
            self._on_reachability(event.reachable)
        elif isinstance(event, MessageReceived):
            self._on_message(event)
        elif isinstance(event, ContextReceived):
            self._on_context(event.payload)

    def _on_reachability(self, reachable: bool) -> None:
        logger.info("Peer %s", "reachable" if reachable else "unreachable")
        if not (reachable and self.auto_request and self._token is None):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; automatic token request skipped")
            return
        task = loop.create_task(self.request_token())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_message(self, event: MessageReceived) -> None:
        try:
            message = codec.decode_message(event.payload)
        except ValueError as e:
            logger.warning("Rejected sync message: %s", e)
            self._reply(event, codec.status_reply(codec.STATUS_ERROR, str(e)))
            return

        action = codec.action_name(message)
        log_sync_message("receive", action, DeliveryMode.LIVE.value)

        if isinstance(message, TokenRequest):
            self._reply(event, codec.encode_reply(self._current_reply()))
            return

        self._apply(message)
        self._reply(event, codec.status_reply(codec.STATUS_SUCCESS, f"{action} applied"))

    def _on_context(self, payload: dict[str, Any]) -> None:
        messages = codec.decode_context(payload)
        if not messages:
            logger.debug("Ignoring empty sync context")
        for message in messages:
            log_sync_message("receive", codec.action_name(message), DeliveryMode.DURABLE.value)
            self._apply(message)

    def _current_reply(self) -> TokenReply:
        token = self._token
        # Never hand out an expired token
        if token is None or not token.is_usable():
            return TokenReply(value=None)
        return TokenReply(value=token.value, owner_login=self._owner_login)

    @staticmethod
    def _reply(event: MessageReceived, payload: dict[str, Any]) -> None:
        if event.reply is not None:
            event.reply(payload)

    async def join(self) -> None:
        """Wait for background token requests started by reachability changes."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def _apply(self, message: SyncMessage, token: AuthToken | None = None) -> None:
        if isinstance(message, TokenUpdate):
            self._token = token or AuthToken.from_value(message.value)
            self._owner_login = message.owner_login or None
            logger.info(
                "Token updated (%s) for %s",
                truncate_token(message.value),
                message.owner_login or "unknown user",
            )
            self._persist_token()
            self._notify_token()
        elif isinstance(message, TokenClear):
            self._token = None
            self._owner_login = None
            logger.info("Token cleared")
            self._persist_token()
            self._notify_token()
        elif isinstance(message, ApiKeyUpdate):
            self._api_key = message.value
            logger.info("API key %s", "updated" if message.value else "cleared")
            self._persist_api_key()
            for callback in list(self._api_key_listeners):
                callback(self._api_key)

    def _notify_token(self) -> None:
        for callback in list(self._token_listeners):
            callback(self._token)

    def _persist_token(self) -> None:
        if self.credential_store is None:
            return
        try:
            if self._token is None:
                self.credential_store.delete(TOKEN_ACCOUNT)
            else:
                data = self._token.to_dict()
                data["username"] = self._owner_login
                self.credential_store.save(TOKEN_ACCOUNT, data)
        except CredentialStoreError as e:
            logger.warning("Could not persist token: %s", e.message)

    def _persist_api_key(self) -> None:
        if self.credential_store is None:
            return
        try:
            if self._api_key is None:
                self.credential_store.delete(API_KEY_ACCOUNT)
            else:
                self.credential_store.save(API_KEY_ACCOUNT, {"api_key": self._api_key})
        except CredentialStoreError as e:
            logger.warning("Could not persist API key: %s", e.message)

    def restore(self) -> AuthToken | None:
        """
        Load the cached token and API key from the credential store.

        Expired tokens are discarded. Store failures are logged.

        Returns:
            The restored token, or None
        """
        if self.credential_store is None:
            return None

        try:
            token_data = self.credential_store.load(TOKEN_ACCOUNT)
            key_data = self.credential_store.load(API_KEY_ACCOUNT)
        except CredentialStoreError as e:
            logger.warning("Could not restore credentials: %s", e.message)
            return None

        if key_data and key_data.get("api_key"):
            self._api_key = key_data["api_key"]
            for callback in list(self._api_key_listeners):
                callback(self._api_key)

        if not token_data:
            return None
        try:
            token = AuthToken.from_dict(token_data)
        except (KeyError, ValueError) as e:
            logger.warning("Discarding malformed stored token: %s", e)
            return None
        if not token.is_usable():
            logger.info("Stored token has expired")
            return None

        self._token = token
        self._owner_login = token_data.get("username") or None
        logger.info("Restored token for %s", self._owner_login or "unknown user")
        self._notify_token()
        return token
