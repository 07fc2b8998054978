"""
VoiceCommit logging utilities.

All package loggers hang off ``voicecommit``. HTTP traffic goes to
``voicecommit.http`` and cross-device messages to ``voicecommit.sync`` so
either can be turned up on its own. Nothing written through these helpers
contains a GitHub token, a backend API key or a bearer header.
"""

import logging
import re
from typing import Any

PACKAGE_LOGGER = "voicecommit"

_root = logging.getLogger(PACKAGE_LOGGER)
_http = logging.getLogger(f"{PACKAGE_LOGGER}.http")
_sync = logging.getLogger(f"{PACKAGE_LOGGER}.sync")

_DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_REDACTED = "[REDACTED]"
_GITHUB_TOKEN = "[GITHUB_TOKEN_REDACTED]"
_API_KEY = "[API_KEY_REDACTED]"

# Applied in order
_REDACTIONS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(Bearer|token)\s+[A-Za-z0-9_\-\.=]{8,}"), rf"\1 {_REDACTED}"),
    (re.compile(r"github_pat_[A-Za-z0-9_]{10,}"), _GITHUB_TOKEN),
    (re.compile(r"gh[pousr]_[A-Za-z0-9]{10,}"), _GITHUB_TOKEN),
    (re.compile(r"sk-ant-[A-Za-z0-9_\-]{10,}"), _API_KEY),
    (re.compile(r"sk-[A-Za-z0-9_\-]{20,}"), _API_KEY),
    (
        re.compile(
            r"(secret|token|password|api_key|x-api-key)['\"]?\s*[:=]\s*['\"][^'\"]+['\"]",
            re.IGNORECASE,
        ),
        rf"\1: {_REDACTED}",
    ),
]

_SECRET_KEYS = frozenset({"authorization", "token", "secret", "password", "api_key", "x-api-key"})

_PREVIEW_CHARS = 4


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    sync_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Attach a handler to the package logger and set levels.

    Args:
        level: Level for the package logger
        http_level: Level for ``voicecommit.http`` (defaults to ``level``)
        sync_level: Level for ``voicecommit.sync`` (defaults to ``level``)
        handler: Handler to attach (default: a stderr StreamHandler)
        format_string: Record format (default: time, logger, level, message)

    Example:
        ```python
        import logging
        from voicecommit.logging import configure_logging

        # Trace every GitHub API call
        configure_logging(level=logging.INFO, http_level=logging.DEBUG)
        ```
    """
    handler = handler or logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string or _DEFAULT_FORMAT))

    _root.setLevel(level)
    _root.addHandler(handler)
    _http.setLevel(level if http_level is None else http_level)
    _sync.setLevel(level if sync_level is None else sync_level)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or ``voicecommit.<name>``."""
    return _root if name is None else logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Redact credentials in free text.

    Covers GitHub tokens of every prefix, bearer/token headers, Anthropic
    and OpenAI keys, and ``token=...`` style assignments.
    """
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


def truncate_token(token: str) -> str:
    """Short prefix of a token for log messages; short tokens are hidden entirely."""
    if len(token) > _PREVIEW_CHARS * 4:
        return token[:_PREVIEW_CHARS] + "..."
    return "[TOKEN_REDACTED]"


def _is_secret_key(key: str, secret_keys: frozenset[str] | set[str]) -> bool:
    lowered = key.lower()
    return any(secret in lowered for secret in secret_keys)


def _redact(value: Any, secret_keys: frozenset[str] | set[str]) -> Any:
    if isinstance(value, dict):
        return safe_log_dict(value, secret_keys)
    if isinstance(value, list):
        return [_redact(item, secret_keys) if isinstance(item, dict) else item for item in value]
    if isinstance(value, str):
        return mask_sensitive_data(value)
    return value


def safe_log_dict(
    data: dict[str, Any], sensitive_keys: frozenset[str] | set[str] | None = None
) -> dict[str, Any]:
    """
    Copy a dictionary for logging.

    Values under a key containing any of ``sensitive_keys`` become
    "[REDACTED]"; nested dicts (also inside lists) are handled the same way
    and remaining strings go through mask_sensitive_data.

    Args:
        data: Dictionary to copy
        sensitive_keys: Lowercase key fragments to hide (default: authorization,
            token, secret, password, api_key, x-api-key)
    """
    keys = _SECRET_KEYS if sensitive_keys is None else sensitive_keys
    return {
        key: _REDACTED if _is_secret_key(key, keys) else _redact(value, keys)
        for key, value in data.items()
    }


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
    body: dict[str, Any] | None = None,
) -> None:
    """Log an outgoing request at DEBUG. File content is reduced to its length."""
    if not _http.isEnabledFor(logging.DEBUG):
        return

    parts = [f"{method} {url}"]
    if headers:
        parts.append(f"headers={safe_log_dict(headers)}")
    if body:
        shown = dict(body)
        content = shown.get("content")
        if isinstance(content, str):
            shown["content"] = f"<{len(content)} chars>"
        parts.append(f"body={safe_log_dict(shown)}")
    _http.debug(" | ".join(parts))


def log_http_response(status_code: int, url: str, elapsed_ms: float | None = None) -> None:
    if not _http.isEnabledFor(logging.DEBUG):
        return

    message = f"Response {status_code} from {url}"
    if elapsed_ms is not None:
        message += f" | elapsed={elapsed_ms:.2f}ms"
    _http.debug(message)


def log_sync_message(direction: str, action: str, mode: str | None = None) -> None:
    """
    Log a sync message at DEBUG.

    Args:
        direction: "send" or "receive"
        action: Wire action such as "tokenUpdate"
        mode: "live" or "durable" when known
    """
    if not _sync.isEnabledFor(logging.DEBUG):
        return

    message = f"{direction}: action={action}"
    if mode:
        message += f" | mode={mode}"
    _sync.debug(message)


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "truncate_token",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_sync_message",
]
