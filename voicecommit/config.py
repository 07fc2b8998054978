"""
Application configuration.

All settings come from ``VOICECOMMIT_*`` environment variables. Malformed
values raise ConfigurationError at load time.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from voicecommit.exceptions import ConfigurationError

PROVIDERS = ("anthropic", "openai", "none")

_DEFAULT_MODELS = {
    "anthropic": "claude-3-5-sonnet-20241022",
    "openai": "gpt-4o",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _env_float(env: Mapping[str, str], name: str, default: float, positive: bool = True) -> float:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {name}: {raw!r}") from e
    if positive and value <= 0:
        raise ConfigurationError(f"{name} must be positive")
    return value


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid {name}: {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive")
    return value


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(f"Invalid {name}: {raw!r} (expected true/false)")


@dataclass
class AppConfig:
    """Settings for every component built by the application."""

    github_api_url: str = "https://api.github.com"
    user_agent: str = "voicecommit-app"
    request_timeout: float = 30.0
    llm_provider: str = "none"
    llm_api_key: str | None = None
    llm_model: str | None = None
    llm_base_url: str | None = None
    llm_max_tokens: int = 4000
    llm_temperature: float = 0.7
    use_templates: bool = True
    demo_mode: bool = False
    branch_prefix: str | None = None
    sync_timeout: float = 5.0
    credentials_path: str | None = None
    log_level: int = logging.INFO

    @property
    def model(self) -> str | None:
        """The configured model, or the provider default."""
        return self.llm_model or _DEFAULT_MODELS.get(self.llm_provider)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "AppConfig":
        """
        Load configuration from the environment.

        Environment variables (all optional):
            VOICECOMMIT_GITHUB_API_URL: GitHub API base URL
            VOICECOMMIT_USER_AGENT: Client identifier sent with API requests
            VOICECOMMIT_REQUEST_TIMEOUT: HTTP timeout in seconds (default: 30)
            VOICECOMMIT_LLM_PROVIDER: anthropic, openai or none (default: none)
            VOICECOMMIT_LLM_API_KEY: Generative backend API key
            VOICECOMMIT_LLM_MODEL: Model id (default depends on provider)
            VOICECOMMIT_LLM_BASE_URL: Backend base URL override
            VOICECOMMIT_LLM_MAX_TOKENS: Max-token budget (default: 4000)
            VOICECOMMIT_LLM_TEMPERATURE: Sampling temperature (default: 0.7)
            VOICECOMMIT_USE_TEMPLATES: Allow the template fallback (default: true)
            VOICECOMMIT_DEMO_MODE: Always use templates (default: false)
            VOICECOMMIT_BRANCH_PREFIX: Commit each result to a fresh branch
            VOICECOMMIT_SYNC_TIMEOUT: Live sync reply timeout (default: 5)
            VOICECOMMIT_CREDENTIALS_PATH: File for the credential store
            VOICECOMMIT_LOG_LEVEL: Logging level name (default: INFO)

        Args:
            env: Mapping to read instead of ``os.environ``

        Raises:
            ConfigurationError: If a value is malformed
        """
        env = os.environ if env is None else env
        p = "VOICECOMMIT_"

        provider = env.get(f"{p}LLM_PROVIDER", "none").strip().lower() or "none"
        if provider not in PROVIDERS:
            raise ConfigurationError(
                f"Invalid {p}LLM_PROVIDER: {provider!r} (expected one of {', '.join(PROVIDERS)})"
            )

        temperature = _env_float(env, f"{p}LLM_TEMPERATURE", 0.7, positive=False)
        if not 0.0 <= temperature <= 2.0:
            raise ConfigurationError(f"{p}LLM_TEMPERATURE must be between 0 and 2")

        level_name = env.get(f"{p}LOG_LEVEL", "INFO").strip().upper()
        log_level = logging.getLevelName(level_name)
        if not isinstance(log_level, int):
            raise ConfigurationError(f"Invalid {p}LOG_LEVEL: {level_name!r}")

        return cls(
            github_api_url=env.get(f"{p}GITHUB_API_URL", cls.github_api_url),
            user_agent=env.get(f"{p}USER_AGENT", cls.user_agent),
            request_timeout=_env_float(env, f"{p}REQUEST_TIMEOUT", cls.request_timeout),
            llm_provider=provider,
            llm_api_key=env.get(f"{p}LLM_API_KEY") or None,
            llm_model=env.get(f"{p}LLM_MODEL") or None,
            llm_base_url=env.get(f"{p}LLM_BASE_URL") or None,
            llm_max_tokens=_env_int(env, f"{p}LLM_MAX_TOKENS", cls.llm_max_tokens),
            llm_temperature=temperature,
            use_templates=_env_bool(env, f"{p}USE_TEMPLATES", cls.use_templates),
            demo_mode=_env_bool(env, f"{p}DEMO_MODE", cls.demo_mode),
            branch_prefix=env.get(f"{p}BRANCH_PREFIX") or None,
            sync_timeout=_env_float(env, f"{p}SYNC_TIMEOUT", cls.sync_timeout),
            credentials_path=env.get(f"{p}CREDENTIALS_PATH") or None,
            log_level=log_level,
        )
