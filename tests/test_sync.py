"""
Tests for the device sync channel.

Feature: voicecommit
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from voicecommit.credentials import MemoryCredentialStore
from voicecommit.exceptions import CredentialStoreError, SyncError
from voicecommit.sync import DeliveryMode, DeviceSyncChannel, LoopbackLink
from voicecommit.sync import codec
from voicecommit.sync.channel import API_KEY_ACCOUNT, TOKEN_ACCOUNT
from voicecommit.types.auth import AuthToken
from voicecommit.types.sync import (
    ApiKeyUpdate,
    ContextReceived,
    MessageReceived,
    TokenClear,
    TokenRequest,
    TokenUpdate,
)

token_value_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz0123456789"), min_size=8, max_size=20
).map(lambda body: "ghp_" + body)


def make_pair(
    link: LoopbackLink, auto_request: bool = False, **kwargs: Any
) -> tuple[DeviceSyncChannel, DeviceSyncChannel]:
    primary = DeviceSyncChannel(link.primary, auto_request=auto_request, **kwargs)
    satellite = DeviceSyncChannel(link.satellite, auto_request=auto_request, **kwargs)
    return primary, satellite


class FailingStore:
    def save(self, account: str, data: dict[str, Any]) -> None:
        raise CredentialStoreError("disk full")

    def load(self, account: str) -> dict[str, Any] | None:
        raise CredentialStoreError("disk unreadable")

    def delete(self, account: str) -> None:
        raise CredentialStoreError("disk full")


# ============================================================================
# Codec
# ============================================================================


def test_codec_live_messages() -> None:
    assert codec.encode_message(TokenUpdate("ghp_x", "octocat")) == {
        "action": "tokenUpdate",
        "token": "ghp_x",
        "username": "octocat",
    }
    assert codec.decode_message({"action": "tokenClear"}) == TokenClear()
    assert codec.decode_message({"action": "requestToken"}) == TokenRequest()
    assert codec.decode_message({"action": "apiKeyUpdate", "apiKey": "sk"}) == ApiKeyUpdate("sk")


@pytest.mark.parametrize(
    "payload",
    [{}, {"action": "selfDestruct"}, {"action": "tokenUpdate", "username": "octocat"}],
)
def test_codec_rejects_malformed_messages(payload: dict[str, Any]) -> None:
    with pytest.raises(ValueError):
        codec.decode_message(payload)


def test_codec_durable_contexts() -> None:
    update = codec.encode_context(TokenUpdate("ghp_x", "octocat"))
    assert update["token"] == "ghp_x"
    assert update["username"] == "octocat"
    assert "timestamp" in update
    assert codec.decode_context(update) == [TokenUpdate("ghp_x", "octocat")]

    cleared = codec.encode_context(TokenClear())
    assert cleared["cleared"] is True
    assert cleared["token"] == ""
    assert codec.decode_context(cleared) == [TokenClear()]

    assert codec.decode_context({"timestamp": 1.0}) == []
    with pytest.raises(ValueError):
        codec.encode_context(TokenRequest())


def test_codec_context_keeps_token_and_api_key_state() -> None:
    state = codec.encode_context(TokenUpdate("ghp_x", "octocat"))
    state = codec.encode_context(ApiKeyUpdate("sk-ant-key"), state)
    assert codec.decode_context(state) == [
        TokenUpdate("ghp_x", "octocat"),
        ApiKeyUpdate("sk-ant-key"),
    ]

    state = codec.encode_context(TokenClear(), state)
    assert codec.decode_context(state) == [TokenClear(), ApiKeyUpdate("sk-ant-key")]

    # A new token lifts the earlier clear
    state = codec.encode_context(TokenUpdate("ghp_y", "mona"), state)
    assert "cleared" not in state
    assert codec.decode_context(state)[0] == TokenUpdate("ghp_y", "mona")


def test_codec_reply_without_token_is_no_token() -> None:
    assert codec.decode_reply(None).value is None
    assert codec.decode_reply({"status": "no_token", "token": ""}).value is None
    assert codec.encode_reply(codec.decode_reply(None))["status"] == "no_token"


# ============================================================================
# Send policy
# ============================================================================


def test_live_delivery_when_reachable() -> None:
    link = LoopbackLink()
    primary, satellite = make_pair(link)
    token = AuthToken.from_value("ghp_live")

    mode = asyncio.run(primary.send_token(token, "octocat"))

    assert mode is DeliveryMode.LIVE
    assert satellite.token is not None
    assert satellite.token.value == "ghp_live"
    assert satellite.owner_login == "octocat"
    assert primary.token == token
    assert link.primary.context_writes == []


def test_durable_delivery_when_unreachable() -> None:
    link = LoopbackLink(reachable=False)
    primary, satellite = make_pair(link)

    mode = asyncio.run(primary.send_token(AuthToken.from_value("ghp_durable"), "octocat"))

    assert mode is DeliveryMode.DURABLE
    assert link.primary.sent_messages == []
    assert satellite.token is None

    link.set_reachable(True)
    assert satellite.token is not None
    assert satellite.token.value == "ghp_durable"


def test_live_failure_falls_back_to_durable() -> None:
    link = LoopbackLink()
    link.fail_live = True
    primary, satellite = make_pair(link)

    mode = asyncio.run(primary.send_token(AuthToken.from_value("ghp_fallback"), "octocat"))

    assert mode is DeliveryMode.DURABLE
    assert link.primary.context_writes[-1]["token"] == "ghp_fallback"
    # Reachable link: the context is delivered immediately
    assert satellite.token is not None
    assert satellite.token.value == "ghp_fallback"


def test_live_timeout_is_fire_and_forget() -> None:
    link = LoopbackLink(reply_delay=1.0)
    primary, satellite = make_pair(link, live_timeout=0.01)

    mode = asyncio.run(primary.send_token(AuthToken.from_value("ghp_slow"), "octocat"))

    assert mode is DeliveryMode.LIVE
    assert link.primary.context_writes == []
    assert satellite.token is not None


def test_durable_writes_overwrite_while_unreachable() -> None:
    link = LoopbackLink(reachable=False)
    primary, satellite = make_pair(link)
    seen: list[str | None] = []
    satellite.subscribe(lambda token: seen.append(token.value if token else None))

    async def scenario() -> None:
        for value in ("ghp_first111", "ghp_second22", "ghp_third333"):
            await primary.send_token(AuthToken.from_value(value), "octocat")

    asyncio.run(scenario())
    link.set_reachable(True)

    # Intermediate writes are superseded; only the last arrives
    assert seen == ["ghp_third333"]


def test_durable_write_failure_is_not_raised() -> None:
    link = LoopbackLink(reachable=False)
    primary, _ = make_pair(link)

    def broken(payload: dict[str, Any]) -> None:
        raise SyncError("context store unavailable")

    link.primary.update_context = broken  # type: ignore[method-assign]
    mode = asyncio.run(primary.send_token(AuthToken.from_value("ghp_x1234567"), "octocat"))

    assert mode is DeliveryMode.FAILED
    # Local state is still updated
    assert primary.token is not None


def test_clear_token_propagates() -> None:
    link = LoopbackLink()
    primary, satellite = make_pair(link)

    async def scenario() -> DeliveryMode:
        await primary.send_token(AuthToken.from_value("ghp_abcdefgh"), "octocat")
        return await primary.clear_token()

    assert asyncio.run(scenario()) is DeliveryMode.LIVE
    assert primary.token is None
    assert satellite.token is None
    assert satellite.owner_login is None


def test_clear_while_unreachable_is_delivered_on_reconnect() -> None:
    link = LoopbackLink()
    primary, satellite = make_pair(link)
    asyncio.run(primary.send_token(AuthToken.from_value("ghp_abcdefgh"), "octocat"))

    link.set_reachable(False)
    assert asyncio.run(primary.clear_token()) is DeliveryMode.DURABLE
    assert satellite.token is not None

    link.set_reachable(True)
    assert satellite.token is None


def test_api_key_sync() -> None:
    link = LoopbackLink()
    primary, satellite = make_pair(link)
    keys: list[str | None] = []
    satellite.subscribe_api_key(keys.append)

    asyncio.run(primary.send_api_key("sk-ant-abc"))
    link.set_reachable(False)
    asyncio.run(primary.send_api_key("sk-ant-def"))
    link.set_reachable(True)

    assert satellite.api_key == "sk-ant-def"
    assert keys == ["sk-ant-abc", "sk-ant-def"]


def test_api_key_while_unreachable_keeps_pending_token() -> None:
    link = LoopbackLink(reachable=False)
    primary, satellite = make_pair(link)

    async def scenario() -> None:
        await primary.send_token(AuthToken.from_value("ghp_pending1"), "octocat")
        await primary.send_api_key("sk-ant-xyz")

    asyncio.run(scenario())
    link.set_reachable(True)

    assert satellite.token is not None
    assert satellite.token.value == "ghp_pending1"
    assert satellite.owner_login == "octocat"
    assert satellite.api_key == "sk-ant-xyz"


def test_api_key_while_unreachable_keeps_pending_clear() -> None:
    link = LoopbackLink()
    primary, satellite = make_pair(link)
    asyncio.run(primary.send_token(AuthToken.from_value("ghp_abcdefgh"), "octocat"))
    link.set_reachable(False)

    async def scenario() -> None:
        await primary.clear_token()
        await primary.send_api_key("sk-ant-xyz")

    asyncio.run(scenario())
    assert satellite.token is not None
    link.set_reachable(True)

    assert satellite.token is None
    assert satellite.api_key == "sk-ant-xyz"


def test_durable_context_reflects_live_sends() -> None:
    link = LoopbackLink(reachable=False)
    primary, satellite = make_pair(link)
    asyncio.run(primary.send_token(AuthToken.from_value("ghp_older111"), "octocat"))
    link.set_reachable(True)
    asyncio.run(primary.send_token(AuthToken.from_value("ghp_newer222"), "octocat"))
    link.set_reachable(False)

    asyncio.run(primary.send_api_key("sk-ant-xyz"))
    link.set_reachable(True)

    # The API key broadcast carries the newest token, not the older durable one
    assert satellite.token is not None
    assert satellite.token.value == "ghp_newer222"


@given(
    updates=st.lists(
        st.tuples(token_value_strategy, st.sampled_from(["live", "durable"])),
        min_size=1,
        max_size=15,
    )
)
@settings(max_examples=100)
def test_property_last_writer_wins(updates: list[tuple[str, str]]) -> None:
    """
    Property: Last writer wins

    For any sequence of token updates delivered through any mix of live
    and durable modes, the receiver's cached token afterwards equals the
    last update sent.
    """
    link = LoopbackLink()
    primary, satellite = make_pair(link)

    async def scenario() -> None:
        for value, mode in updates:
            link.set_reachable(mode == "live")
            await primary.send_token(AuthToken.from_value(value), "octocat")
        link.set_reachable(True)

    asyncio.run(scenario())

    assert satellite.token is not None
    assert satellite.token.value == updates[-1][0]


# ============================================================================
# Receive policy
# ============================================================================


def test_token_request_reply() -> None:
    link = LoopbackLink()
    primary, satellite = make_pair(link)

    async def scenario() -> AuthToken | None:
        primary._apply(TokenUpdate("ghp_primary1", "octocat"))
        return await satellite.request_token()

    token = asyncio.run(scenario())

    assert token is not None
    assert token.value == "ghp_primary1"
    assert satellite.owner_login == "octocat"


def test_token_request_when_peer_has_no_token() -> None:
    link = LoopbackLink()
    primary, satellite = make_pair(link)
    replies: list[dict[str, Any]] = []

    primary.handle_event(MessageReceived(payload={"action": "requestToken"}, reply=replies.append))

    assert replies == [
        {"token": "", "username": "", "status": "no_token", "message": "No token available"}
    ]
    assert asyncio.run(satellite.request_token()) is None


def test_token_request_never_replies_with_expired_token() -> None:
    link = LoopbackLink()
    primary, _ = make_pair(link)
    expired = AuthToken.from_value(
        "ghp_expired1", expires_at=datetime.now(timezone.utc) - timedelta(seconds=1)
    )
    primary._apply(TokenUpdate(expired.value, "octocat"), token=expired)
    replies: list[dict[str, Any]] = []

    primary.handle_event(MessageReceived(payload={"action": "requestToken"}, reply=replies.append))

    assert replies[0]["status"] == "no_token"
    assert replies[0]["token"] == ""


def test_token_request_skipped_when_unreachable() -> None:
    link = LoopbackLink(reachable=False)
    primary, satellite = make_pair(link)
    primary._apply(TokenUpdate("ghp_primary1", "octocat"))

    assert asyncio.run(satellite.request_token()) is None
    assert link.satellite.sent_messages == []


def test_unknown_action_gets_error_reply() -> None:
    link = LoopbackLink()
    primary, _ = make_pair(link)
    replies: list[dict[str, Any]] = []

    primary.handle_event(MessageReceived(payload={"action": "launch"}, reply=replies.append))

    assert replies == [{"status": "error", "message": "Unknown action: launch"}]
    assert primary.token is None


def test_update_is_acknowledged() -> None:
    link = LoopbackLink()
    primary, _ = make_pair(link)
    replies: list[dict[str, Any]] = []

    primary.handle_event(
        MessageReceived(
            payload={"action": "tokenUpdate", "token": "ghp_incoming", "username": "mona"},
            reply=replies.append,
        )
    )

    assert replies[0]["status"] == "success"
    assert primary.token is not None
    assert primary.owner_login == "mona"


def test_empty_context_is_ignored() -> None:
    link = LoopbackLink()
    primary, _ = make_pair(link)
    primary._apply(TokenUpdate("ghp_keepme12", "octocat"))

    primary.handle_event(ContextReceived(payload={"timestamp": 1.0}))

    assert primary.token is not None
    assert primary.token.value == "ghp_keepme12"


def test_auto_request_on_reachability() -> None:
    link = LoopbackLink(reachable=False)
    primary = DeviceSyncChannel(link.primary, auto_request=False)
    satellite = DeviceSyncChannel(link.satellite, auto_request=True)
    primary._apply(TokenUpdate("ghp_primary1", "octocat"))

    async def scenario() -> None:
        link.set_reachable(True)
        await satellite.join()

    asyncio.run(scenario())

    assert satellite.token is not None
    assert satellite.token.value == "ghp_primary1"
    assert link.satellite.sent_messages == [{"action": "requestToken"}]


def test_no_auto_request_when_token_cached() -> None:
    link = LoopbackLink(reachable=False)
    satellite = DeviceSyncChannel(link.satellite, auto_request=True)
    satellite._apply(TokenUpdate("ghp_cached12", "octocat"))

    async def scenario() -> None:
        link.set_reachable(True)
        await satellite.join()

    asyncio.run(scenario())
    assert link.satellite.sent_messages == []


def test_unsubscribe() -> None:
    link = LoopbackLink()
    channel = DeviceSyncChannel(link.primary, auto_request=False)
    seen: list[AuthToken | None] = []
    unsubscribe = channel.subscribe(seen.append)

    channel._apply(TokenUpdate("ghp_one12345", "octocat"))
    unsubscribe()
    channel._apply(TokenClear())

    assert len(seen) == 1


# ============================================================================
# Persistence
# ============================================================================


def test_accepted_token_is_persisted_and_restored() -> None:
    store = MemoryCredentialStore()
    link = LoopbackLink()
    primary, satellite = make_pair(link, credential_store=store)

    asyncio.run(primary.send_token(AuthToken.from_value("github_pat_abc123"), "octocat"))
    saved = store.load(TOKEN_ACCOUNT)
    assert saved is not None
    assert saved["access_token"] == "github_pat_abc123"
    assert saved["token_type"] == "fine-grained"
    assert saved["username"] == "octocat"

    restored_channel = DeviceSyncChannel(LoopbackLink().satellite, credential_store=store)
    restored = restored_channel.restore()
    assert restored is not None
    assert restored.value == "github_pat_abc123"
    assert restored_channel.owner_login == "octocat"


def test_clear_deletes_persisted_token() -> None:
    store = MemoryCredentialStore()
    channel = DeviceSyncChannel(LoopbackLink().primary, credential_store=store, auto_request=False)

    channel._apply(TokenUpdate("ghp_abcdefgh", "octocat"))
    channel._apply(TokenClear())

    assert store.load(TOKEN_ACCOUNT) is None


def test_restore_discards_expired_token() -> None:
    store = MemoryCredentialStore()
    expired = AuthToken.from_value(
        "ghp_old12345", expires_at=datetime.now(timezone.utc) - timedelta(days=1)
    )
    store.save(TOKEN_ACCOUNT, expired.to_dict())

    channel = DeviceSyncChannel(LoopbackLink().primary, credential_store=store)
    assert channel.restore() is None
    assert channel.token is None


def test_restore_api_key() -> None:
    store = MemoryCredentialStore()
    store.save(API_KEY_ACCOUNT, {"api_key": "sk-ant-restored"})

    channel = DeviceSyncChannel(LoopbackLink().primary, credential_store=store)
    channel.restore()

    assert channel.api_key == "sk-ant-restored"


def test_store_failures_are_not_raised() -> None:
    channel = DeviceSyncChannel(
        LoopbackLink().primary, credential_store=FailingStore(), auto_request=False
    )

    channel._apply(TokenUpdate("ghp_abcdefgh", "octocat"))
    channel._apply(TokenClear())

    assert channel.restore() is None
