"""Unit tests for provider clients and response normalization."""

import base64

import httpx
import pytest
import pytest_check as check

from shniro.broker.config import BrokerConfig
from shniro.broker.providers import (
    GeminiProvider,
    GroqProvider,
    ProviderStatus,
    extract_chat_completion,
    extract_gemini_first_text,
    extract_gemini_text,
)
from tests.stubs import ProviderStub, chat_completion, fail_with, gemini_response, respond


class TestExtraction:
    """Missing fields normalize to None, never raise."""

    @pytest.mark.parametrize("data", [
        None,
        [],
        {},
        {"candidates": []},
        {"candidates": [{}]},
        {"candidates": [{"content": None}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]},
    ])
    def test_gemini_shapes_without_text(self, data: object) -> None:
        check.is_none(extract_gemini_text(data))
        check.is_none(extract_gemini_first_text(data))

    def test_gemini_text_joins_parts(self) -> None:
        data = gemini_response("First.", "Second.")

        assert extract_gemini_text(data) == "First.\n\nSecond."

    def test_gemini_first_text_takes_first_part(self) -> None:
        data = gemini_response("First.", "Second.")

        assert extract_gemini_first_text(data) == "First."

    def test_gemini_first_text_ignores_empty_string(self) -> None:
        assert extract_gemini_first_text(gemini_response("")) is None

    @pytest.mark.parametrize("data", [
        None,
        {},
        {"choices": []},
        {"choices": [{}]},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
        {"error": {"message": "rate limited"}},
    ])
    def test_chat_completion_shapes_without_content(self, data: object) -> None:
        assert extract_chat_completion(data) is None

    def test_chat_completion_content(self) -> None:
        assert extract_chat_completion(chat_completion("42")) == "42"


@pytest.fixture
def stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
async def http_client(stub: ProviderStub) -> httpx.AsyncClient:
    async with httpx.AsyncClient(transport=stub.transport()) as client:
        yield client


class TestGeminiProvider:
    async def test_describe_image_payload(
        self, stub: ProviderStub, http_client: httpx.AsyncClient, broker_config: BrokerConfig
    ) -> None:
        """Image is sent inline as base64 ahead of the question text."""
        provider = GeminiProvider(http_client, broker_config)

        result = await provider.describe_image(b"\x89PNG", "image/png", "What is this?")

        check.equal(result.status, ProviderStatus.OK)
        check.equal(result.text, "Gemini answer")

        request = stub.calls("googleapis")[0]
        check.is_true(request.url.path.endswith("/models/gemini-2.5-flash:generateContent"))
        check.equal(request.url.params["key"], "test-gemini-key")

        parts = stub.payloads("googleapis")[0]["contents"][0]["parts"]
        check.equal(parts[0]["inlineData"]["mimeType"], "image/png")
        check.equal(base64.b64decode(parts[0]["inlineData"]["data"]), b"\x89PNG")
        check.equal(parts[1], {"text": "What is this?"})

    async def test_answer_sends_text_only(
        self, stub: ProviderStub, http_client: httpx.AsyncClient, broker_config: BrokerConfig
    ) -> None:
        provider = GeminiProvider(http_client, broker_config)

        await provider.answer("Why is the sky blue?")

        payload = stub.payloads("googleapis")[0]
        assert payload == {
            "contents": [{"role": "user", "parts": [{"text": "Why is the sky blue?"}]}]
        }


class TestGroqProvider:
    async def test_complete_payload_and_auth(
        self, stub: ProviderStub, http_client: httpx.AsyncClient, broker_config: BrokerConfig
    ) -> None:
        provider = GroqProvider(http_client, broker_config)
        messages = [{"role": "user", "content": "hi"}]

        result = await provider.complete(messages)

        check.is_true(result.ok)
        check.equal(result.text, "Groq answer")

        request = stub.calls("groq")[0]
        check.equal(str(request.url), "https://api.groq.com/openai/v1/chat/completions")
        check.equal(request.headers["Authorization"], "Bearer test-groq-key")
        check.equal(
            stub.payloads("groq")[0],
            {"model": "llama-3.1-8b-instant", "messages": messages, "temperature": 0.3},
        )

    async def test_non_success_status(
        self, stub: ProviderStub, http_client: httpx.AsyncClient, broker_config: BrokerConfig
    ) -> None:
        stub.groq = respond(429, {"error": {"message": "rate limited"}})
        provider = GroqProvider(http_client, broker_config)

        result = await provider.complete([])

        check.equal(result.status, ProviderStatus.HTTP_ERROR)
        check.equal(result.status_code, 429)
        check.is_none(result.text)
        check.is_false(result.failed_in_transport)

    @pytest.mark.parametrize("exc_type, expected", [
        (httpx.ReadTimeout, ProviderStatus.TIMEOUT),
        (httpx.ConnectTimeout, ProviderStatus.TIMEOUT),
        (httpx.ConnectError, ProviderStatus.TRANSPORT_ERROR),
    ])
    async def test_transport_failures_are_typed(
        self,
        stub: ProviderStub,
        http_client: httpx.AsyncClient,
        broker_config: BrokerConfig,
        exc_type: type[httpx.TransportError],
        expected: ProviderStatus,
    ) -> None:
        stub.groq = fail_with(exc_type)
        provider = GroqProvider(http_client, broker_config)

        result = await provider.complete([])

        check.equal(result.status, expected)
        check.is_true(result.failed_in_transport)

    async def test_non_json_body(
        self, stub: ProviderStub, http_client: httpx.AsyncClient, broker_config: BrokerConfig
    ) -> None:
        stub.groq = lambda request: httpx.Response(200, text="<html>oops</html>")
        provider = GroqProvider(http_client, broker_config)

        result = await provider.complete([])

        check.equal(result.status, ProviderStatus.TRANSPORT_ERROR)
        check.equal(result.status_code, 200)
