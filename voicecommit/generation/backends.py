"""
Generative text backends.

Each backend sends the system instruction and user prompt to an HTTP
completion endpoint and returns the generated text. Provider response
shapes differ only in where the text lives.
"""

from abc import ABC, abstractmethod
from typing import Any, Protocol

import httpx

from voicecommit.exceptions import ApiError, GenerationError, NetworkError
from voicecommit.logging import log_http_request, log_http_response


class GenerativeBackend(Protocol):
    """Turns a prompt into free text."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the generated text for the given prompts."""


class HTTPBackend(ABC):
    """
    Shared request/response handling for HTTP completion endpoints.

    Subclasses supply the provider specifics: auth headers, request body and
    where the text sits in the response.
    """

    path = ""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        max_tokens: int = 4000,
        temperature: float = 0.7,
        timeout: float = 30.0,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=http_transport,
            headers={"Content-Type": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Call the endpoint and extract the generated text.

        Raises:
            NetworkError: If the endpoint cannot be reached
            ApiError: On a non-2xx status
            GenerationError: If the response carries no text
        """
        body = self.build_body(system_prompt, user_prompt)
        headers = self.auth_headers()
        url = f"{self.base_url}{self.path}"
        log_http_request("POST", url, headers=headers)

        try:
            response = await self._client.post(self.path, json=body, headers=headers)
        except httpx.RequestError as e:
            raise NetworkError(f"Generative backend unreachable: {e}") from e

        log_http_response(response.status_code, url)

        if not response.is_success:
            raise ApiError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError(f"Backend response is not JSON: {e}") from e

        text = self.extract_text(data)
        if not isinstance(text, str) or not text.strip():
            raise GenerationError("Backend returned an empty response")
        return text

    @abstractmethod
    def auth_headers(self) -> dict[str, str]:
        """Provider authentication headers."""

    @abstractmethod
    def build_body(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        """JSON request body for the prompts."""

    @abstractmethod
    def extract_text(self, data: Any) -> str:
        """
        Pull the generated text out of a decoded response.

        Raises:
            GenerationError: If the response does not have the expected shape
        """


class AnthropicBackend(HTTPBackend):
    """Messages API: text under ``content[0].text``."""

    path = "/v1/messages"
    DEFAULT_BASE_URL = "https://api.anthropic.com"
    API_VERSION = "2023-06-01"

    def auth_headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key, "anthropic-version": self.API_VERSION}

    def build_body(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }

    def extract_text(self, data: Any) -> str:
        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, list):
            raise GenerationError("Backend response has no content list")
        return _join_text_blocks(content)


class OpenAIBackend(HTTPBackend):
    """Chat completions API: text under ``choices[0].message.content``."""

    path = "/chat/completions"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def build_body(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }

    def extract_text(self, data: Any) -> str:
        try:
            message = data["choices"][0]["message"]
            content = message.get("content")
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise GenerationError(f"Backend response has no message: {e!r}") from e
        if isinstance(content, list):
            return _join_text_blocks(content)
        return content if isinstance(content, str) else ""


def _join_text_blocks(blocks: list[Any]) -> str:
    """Concatenate the text of ``{"type": "text", "text": ...}`` blocks, skipping anything else."""
    return "".join(
        block["text"]
        for block in blocks
        if isinstance(block, dict)
        and block.get("type", "text") == "text"
        and isinstance(block.get("text"), str)
    )
