"""
Composition root.

Builds each component once from an AppConfig and wires them into a
RequestCoordinator. One VoiceCommitApp corresponds to one process (the
primary device or the satellite).
"""

import logging
from typing import Any

import httpx

from voicecommit.client import GitHubClient
from voicecommit.config import AppConfig
from voicecommit.coordinator import RequestCoordinator
from voicecommit.credentials import CredentialStore, FileCredentialStore, MemoryCredentialStore
from voicecommit.exceptions import ConfigurationError
from voicecommit.generation.backends import AnthropicBackend, GenerativeBackend, OpenAIBackend
from voicecommit.generation.pipeline import CodeGenerationPipeline
from voicecommit.logging import configure_logging
from voicecommit.sync.channel import DeviceSyncChannel
from voicecommit.sync.peer import PeerTransport

logger = logging.getLogger("voicecommit")


def build_backend(
    config: AppConfig,
    api_key: str | None = None,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> GenerativeBackend | None:
    """
    Build the generative backend named by the configuration.

    Args:
        config: Application configuration
        api_key: Key to use when the configuration has none (for example one
            received from the paired device)
        http_transport: Custom httpx transport (used by tests)

    Returns:
        The backend, or None for provider ``none``

    Raises:
        ConfigurationError: If a provider is set but no API key is available
    """
    if config.llm_provider == "none":
        return None

    key = config.llm_api_key or api_key
    if not key:
        raise ConfigurationError(f"No API key configured for provider {config.llm_provider!r}")

    backend_cls = AnthropicBackend if config.llm_provider == "anthropic" else OpenAIBackend
    return backend_cls(
        api_key=key,
        model=config.model or "",
        base_url=config.llm_base_url or backend_cls.DEFAULT_BASE_URL,
        max_tokens=config.llm_max_tokens,
        temperature=config.llm_temperature,
        timeout=config.request_timeout,
        http_transport=http_transport,
    )


class VoiceCommitApp:
    """
    The wired application.

    Example:
        ```python
        from voicecommit import AppConfig, VoiceCommitApp
        from voicecommit.sync import LoopbackLink

        link = LoopbackLink()
        app = VoiceCommitApp(AppConfig.from_env(), link.satellite)
        app.channel.restore()
        ```

    Args:
        config: Application configuration
        peer: Link to the paired process
        credential_store: Store for the cached token (default: a file store
            when ``credentials_path`` is set, otherwise in memory)
        github_http_transport: Custom httpx transport for GitHub (tests)
        backend_http_transport: Custom httpx transport for the backend (tests)
    """

    def __init__(
        self,
        config: AppConfig,
        peer: PeerTransport,
        credential_store: CredentialStore | None = None,
        github_http_transport: httpx.AsyncBaseTransport | None = None,
        backend_http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._backend_http_transport = backend_http_transport

        if credential_store is None:
            credential_store = (
                FileCredentialStore(config.credentials_path)
                if config.credentials_path
                else MemoryCredentialStore()
            )
        self.credential_store = credential_store

        self.github = GitHubClient(
            base_url=config.github_api_url,
            user_agent=config.user_agent,
            timeout=config.request_timeout,
            http_transport=github_http_transport,
        )
        self.channel = DeviceSyncChannel(
            peer,
            credential_store=credential_store,
            live_timeout=config.sync_timeout,
        )
        self.pipeline = CodeGenerationPipeline(
            backend=self._build_backend_or_templates(None),
            use_templates=config.use_templates,
            demo_mode=config.demo_mode,
            branch_prefix=config.branch_prefix,
        )
        # Backends replaced by a synced key; their clients are closed with the app
        self._retired_backends: list[GenerativeBackend] = []
        self.coordinator = RequestCoordinator(self.channel, self.pipeline, self.github)
        self.channel.subscribe_api_key(self._on_api_key_changed)

    @classmethod
    def from_env(cls, peer: PeerTransport, **kwargs: Any) -> "VoiceCommitApp":
        """Load AppConfig from the environment, configure logging and build the app."""
        config = AppConfig.from_env()
        configure_logging(level=config.log_level)
        return cls(config, peer, **kwargs)

    def _build_backend_or_templates(self, api_key: str | None) -> GenerativeBackend | None:
        try:
            return build_backend(self.config, api_key, self._backend_http_transport)
        except ConfigurationError as e:
            if not self.config.use_templates:
                raise
            logger.warning("%s; using templates only", e.message)
            return None

    def _on_api_key_changed(self, api_key: str | None) -> None:
        # A locally configured key takes precedence over a synced one
        if self.config.llm_api_key or self.config.llm_provider == "none":
            return
        previous = self.pipeline.backend
        self.pipeline.backend = self._build_backend_or_templates(api_key)
        if previous is not None and previous is not self.pipeline.backend:
            self._retired_backends.append(previous)

    async def close(self) -> None:
        self.coordinator.close()
        await self.github.close()
        backends = [*self._retired_backends, self.pipeline.backend]
        self._retired_backends = []
        for backend in backends:
            close_backend = getattr(backend, "close", None)
            if close_backend is not None:
                await close_backend()

    async def __aenter__(self) -> "VoiceCommitApp":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
