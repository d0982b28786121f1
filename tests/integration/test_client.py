"""Integration tests for the page's HTTP client against the real app."""

import httpx
import pytest
import pytest_check as check
from httpx import AsyncClient

from shniro.models.schemas import (
    NETWORK_ERROR_MESSAGE,
    NO_ANSWER_MESSAGE,
    NO_INPUT_MESSAGE,
    SERVER_ERROR_MESSAGE,
)
from shniro.ui.client import ImageUpload, api_base_url, extract_answer, request_answer
from tests.stubs import ProviderStub, gemini_response, respond


def _static_client(responder) -> AsyncClient:
    return AsyncClient(transport=httpx.MockTransport(responder), base_url="http://test")


class TestRequestAnswer:
    async def test_answer_is_returned_for_reveal(
        self, async_client: AsyncClient, provider_stub: ProviderStub
    ) -> None:
        reply = await request_answer("What is 2+2?", client=async_client)

        check.is_true(reply.ok)
        check.equal(reply.text, "Groq answer")

    async def test_no_input_is_caught_before_sending(
        self, async_client: AsyncClient, provider_stub: ProviderStub
    ) -> None:
        reply = await request_answer("   ", client=async_client)

        check.is_false(reply.ok)
        check.equal(reply.text, NO_INPUT_MESSAGE)
        check.equal(provider_stub.requests, [])

    async def test_image_only_request(
        self, async_client: AsyncClient, provider_stub: ProviderStub
    ) -> None:
        provider_stub.gemini = respond(200, gemini_response("A square."))
        image = ImageUpload(name="sq.png", content=b"\x89PNG....", mime_type="image/png")

        reply = await request_answer("", image=image, client=async_client)

        check.equal(reply.text, "A square.")
        check.equal(len(provider_stub.calls("googleapis")), 1)

    async def test_empty_answer_message(
        self, async_client: AsyncClient, provider_stub: ProviderStub
    ) -> None:
        provider_stub.gemini = respond(200, {})
        image = ImageUpload(name="sq.png", content=b"\x89PNG....", mime_type="image/png")

        reply = await request_answer("", image=image, client=async_client)

        check.is_false(reply.ok)
        check.equal(reply.text, NO_ANSWER_MESSAGE)

    async def test_rejected_upload_shows_detail(self, async_client: AsyncClient) -> None:
        image = ImageUpload(name="a.txt", content=b"text", mime_type="text/plain")

        reply = await request_answer("hi", image=image, client=async_client)

        check.is_false(reply.ok)
        check.is_in("Only image files are accepted", reply.text)

    async def test_network_failure_message(self) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _static_client(responder) as client:
            reply = await request_answer("hi", client=client)

        check.is_false(reply.ok)
        check.equal(reply.text, NETWORK_ERROR_MESSAGE)

    async def test_non_json_response_message(self) -> None:
        async with _static_client(lambda r: httpx.Response(502, text="Bad gateway")) as client:
            reply = await request_answer("hi", client=client)

        check.is_false(reply.ok)
        check.equal(reply.text, SERVER_ERROR_MESSAGE)

    async def test_messages_are_distinct(self) -> None:
        assert len({NO_INPUT_MESSAGE, NETWORK_ERROR_MESSAGE, SERVER_ERROR_MESSAGE, NO_ANSWER_MESSAGE}) == 4


class TestExtractAnswer:
    @pytest.mark.parametrize("data, expected", [
        ({"answer": "a"}, "a"),
        ({"result": "r"}, "r"),
        ({"output": "o", "text": "t"}, "o"),
        ({"answer": "", "text": "t"}, "t"),
        ({"answer": None}, None),
        ({}, None),
        (["answer"], None),
    ])
    def test_first_present_key_wins(self, data: object, expected: str | None) -> None:
        assert extract_answer(data) == expected


class TestApiBaseUrl:
    def test_follows_server_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("API_BASE_URL", raising=False)
        monkeypatch.setenv("PORT", "9123")

        assert api_base_url() == "http://localhost:9123"

    def test_defaults_to_port_8000(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("API_BASE_URL", raising=False)
        monkeypatch.delenv("PORT", raising=False)

        assert api_base_url() == "http://localhost:8000"

    def test_explicit_url_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("API_BASE_URL", "http://broker.internal:7000")
        monkeypatch.setenv("PORT", "9123")

        assert api_base_url() == "http://broker.internal:7000"
