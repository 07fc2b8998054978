"""Wire encoding of sync messages and durable contexts."""

import time
from typing import Any

from voicecommit.types.sync import (
    ApiKeyUpdate,
    SyncMessage,
    TokenClear,
    TokenReply,
    TokenRequest,
    TokenUpdate,
)

ACTION_TOKEN_UPDATE = "tokenUpdate"
ACTION_TOKEN_CLEAR = "tokenClear"
ACTION_TOKEN_REQUEST = "requestToken"
ACTION_API_KEY_UPDATE = "apiKeyUpdate"

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"
STATUS_NO_TOKEN = "no_token"


def action_name(message: SyncMessage) -> str:
    if isinstance(message, TokenUpdate):
        return ACTION_TOKEN_UPDATE
    if isinstance(message, TokenClear):
        return ACTION_TOKEN_CLEAR
    if isinstance(message, TokenRequest):
        return ACTION_TOKEN_REQUEST
    if isinstance(message, ApiKeyUpdate):
        return ACTION_API_KEY_UPDATE
    return "tokenReply"


def encode_message(message: SyncMessage) -> dict[str, Any]:
    """Encode a message for live delivery."""
    if isinstance(message, TokenUpdate):
        return {"action": ACTION_TOKEN_UPDATE, "token": message.value, "username": message.owner_login}
    if isinstance(message, TokenClear):
        return {"action": ACTION_TOKEN_CLEAR}
    if isinstance(message, TokenRequest):
        return {"action": ACTION_TOKEN_REQUEST}
    if isinstance(message, ApiKeyUpdate):
        return {"action": ACTION_API_KEY_UPDATE, "apiKey": message.value or ""}
    return encode_reply(message)


def encode_reply(reply: TokenReply) -> dict[str, Any]:
    if not reply.value:
        return {"token": "", "username": "", "status": STATUS_NO_TOKEN, "message": "No token available"}
    return {"token": reply.value, "username": reply.owner_login or "", "status": STATUS_SUCCESS}


def status_reply(status: str, message: str) -> dict[str, Any]:
    """Acknowledgement sent back for a live message."""
    return {"status": status, "message": message}


def decode_reply(payload: dict[str, Any] | None) -> TokenReply:
    """Decode a tokenRequest answer; anything without a token means no token."""
    if not payload:
        return TokenReply(value=None)
    token = payload.get("token")
    if not isinstance(token, str) or not token:
        return TokenReply(value=None)
    return TokenReply(value=token, owner_login=payload.get("username") or None)


def decode_message(payload: dict[str, Any]) -> SyncMessage:
    """
    Decode a live message.

    Raises:
        ValueError: If the action is unknown or a required field is missing
    """
    action = payload.get("action")
    if action == ACTION_TOKEN_UPDATE:
        token = payload.get("token")
        username = payload.get("username")
        if not isinstance(token, str) or not token or not isinstance(username, str):
            raise ValueError("Invalid token data")
        return TokenUpdate(value=token, owner_login=username)
    if action == ACTION_TOKEN_CLEAR:
        return TokenClear()
    if action == ACTION_TOKEN_REQUEST:
        return TokenRequest()
    if action == ACTION_API_KEY_UPDATE:
        return ApiKeyUpdate(value=payload.get("apiKey") or None)
    if action is None:
        raise ValueError("No action specified")
    raise ValueError(f"Unknown action: {action}")


def encode_context(message: SyncMessage, state: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Fold a message into the durable last-value context.

    The context holds the sender's latest token and API key state together,
    so a later write of one never drops a pending write of the other. Only
    tokenUpdate, tokenClear and apiKeyUpdate have a durable form.

    Args:
        message: The update being sent
        state: The previously broadcast context, if any

    Raises:
        ValueError: If the message has no durable form
    """
    context = {key: value for key, value in (state or {}).items() if key != "timestamp"}
    if isinstance(message, TokenUpdate):
        context.pop("cleared", None)
        context.update(token=message.value, username=message.owner_login)
    elif isinstance(message, TokenClear):
        context.update(token="", username="", cleared=True)
    elif isinstance(message, ApiKeyUpdate):
        context["apiKey"] = message.value or ""
    else:
        raise ValueError(f"{action_name(message)} has no durable form")
    context["timestamp"] = time.time()
    return context


def decode_context(payload: dict[str, Any]) -> list[SyncMessage]:
    """Decode a durable context into the updates it carries, token first."""
    messages: list[SyncMessage] = []
    token = payload.get("token")
    if payload.get("cleared"):
        messages.append(TokenClear())
    elif isinstance(token, str) and token:
        messages.append(TokenUpdate(value=token, owner_login=payload.get("username") or ""))
    if "apiKey" in payload:
        messages.append(ApiKeyUpdate(value=payload.get("apiKey") or None))
    return messages
