"""Outbound LLM provider clients.

Each provider returns a typed ProviderResult instead of raising, so the
router can tell a non-success status (worth falling back on) apart from
a transport failure (network error, timeout, undecodable body).

Response envelopes differ per provider; the extract_* helpers walk each
shape defensively and treat any missing field as "no answer".
"""

import base64
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from shniro.broker.config import BrokerConfig

logger = logging.getLogger(__name__)

Extractor = Callable[[Any], str | None]


class ProviderStatus(str, Enum):
    """Outcome of one outbound provider call."""

    OK = "ok"
    HTTP_ERROR = "http_error"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class ProviderResult:
    """Normalized result of a provider call.

    Attributes:
        status: Call outcome.
        text: Extracted answer text, None when the response held none.
        status_code: HTTP status code when a response was received.
        error: Human-readable failure description.
    """

    status: ProviderStatus
    text: str | None = None
    status_code: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ProviderStatus.OK

    @property
    def failed_in_transport(self) -> bool:
        return self.status in (ProviderStatus.TIMEOUT, ProviderStatus.TRANSPORT_ERROR)


def _first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None


def _candidate_parts(data: Any) -> list[Any]:
    if not isinstance(data, dict):
        return []
    candidate = _first(data.get("candidates"))
    if not isinstance(candidate, dict):
        return []
    content = candidate.get("content")
    if not isinstance(content, dict):
        return []
    parts = content.get("parts")
    return parts if isinstance(parts, list) else []


def extract_gemini_text(data: Any) -> str | None:
    """Join all text parts of the first candidate with blank lines."""
    texts = [
        part["text"]
        for part in _candidate_parts(data)
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    ]
    if not texts:
        return None
    return "\n\n".join(texts)


def extract_gemini_first_text(data: Any) -> str | None:
    """Return the first candidate's first text part, or None if empty."""
    first = _first(_candidate_parts(data))
    if isinstance(first, dict) and isinstance(first.get("text"), str) and first["text"]:
        return first["text"]
    return None


def extract_chat_completion(data: Any) -> str | None:
    """Return the first choice's message content of a chat completion."""
    if not isinstance(data, dict):
        return None
    choice = _first(data.get("choices"))
    if not isinstance(choice, dict):
        return None
    message = choice.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) and content else None


class _HTTPProvider:
    """Shared request/normalize loop for JSON-over-HTTP providers."""

    name = "provider"

    def __init__(self, client: httpx.AsyncClient, timeout: float) -> None:
        self._client = client
        self._timeout = timeout

    async def _post(
        self,
        url: str,
        payload: dict[str, Any],
        extract: Extractor,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> ProviderResult:
        try:
            response = await self._client.post(
                url,
                json=payload,
                headers=headers,
                params=params,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"{self.name} timed out after {self._timeout}s")
            return ProviderResult(ProviderStatus.TIMEOUT, error=str(e) or "timeout")
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} request failed: {e}")
            return ProviderResult(ProviderStatus.TRANSPORT_ERROR, error=str(e))

        if not response.is_success:
            logger.warning(f"{self.name} returned HTTP {response.status_code}")
            return ProviderResult(
                ProviderStatus.HTTP_ERROR,
                status_code=response.status_code,
                error=response.text[:500],
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"{self.name} returned a non-JSON body: {e}")
            return ProviderResult(
                ProviderStatus.TRANSPORT_ERROR,
                status_code=response.status_code,
                error=f"Invalid JSON: {e}",
            )

        return ProviderResult(
            ProviderStatus.OK,
            text=extract(data),
            status_code=response.status_code,
        )


class GeminiProvider(_HTTPProvider):
    """Gemini generateContent client, used for images and as text fallback."""

    name = "gemini"

    def __init__(self, client: httpx.AsyncClient, config: BrokerConfig) -> None:
        super().__init__(client, config.provider_timeout)
        self._url = f"{config.gemini_base_url}/models/{config.gemini_model}:generateContent"
        self._api_key = config.gemini_api_key

    async def _generate(self, parts: list[dict[str, Any]], extract: Extractor) -> ProviderResult:
        payload = {"contents": [{"role": "user", "parts": parts}]}
        return await self._post(
            self._url,
            payload,
            extract,
            headers={"Content-Type": "application/json"},
            params={"key": self._api_key},
        )

    async def describe_image(
        self, image: bytes, mime_type: str, question: str
    ) -> ProviderResult:
        """Ask a question about an image; answer is all text parts joined."""
        parts = [
            {
                "inlineData": {
                    "mimeType": mime_type,
                    "data": base64.b64encode(image).decode("ascii"),
                }
            },
            {"text": question},
        ]
        return await self._generate(parts, extract_gemini_text)

    async def answer(self, question: str) -> ProviderResult:
        """Text-only question; answer is the first text part."""
        return await self._generate([{"text": question}], extract_gemini_first_text)


class GroqProvider(_HTTPProvider):
    """OpenAI-compatible chat completions client."""

    name = "groq"

    def __init__(self, client: httpx.AsyncClient, config: BrokerConfig) -> None:
        super().__init__(client, config.provider_timeout)
        self._url = f"{config.groq_base_url}/chat/completions"
        self._api_key = config.groq_api_key
        self._model = config.groq_model
        self._temperature = config.temperature

    async def complete(self, messages: list[dict[str, str]]) -> ProviderResult:
        payload = {
            "model": self._model,
            "messages": messages,
            "temperature": self._temperature,
        }
        return await self._post(
            self._url,
            payload,
            extract_chat_completion,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
        )
