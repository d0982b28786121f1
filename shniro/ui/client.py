"""HTTP client used by the chat page to ask the broker.

Every failure maps to a short user-facing message; nothing is retried,
the user resubmits.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any

import httpx

from shniro.models.schemas import (
    NETWORK_ERROR_MESSAGE,
    NO_ANSWER_MESSAGE,
    NO_INPUT_MESSAGE,
    SERVER_ERROR_MESSAGE,
)

logger = logging.getLogger(__name__)

DEFAULT_PORT = "8000"

# Keys the answer may arrive under, in order of preference
ANSWER_KEYS = ("answer", "result", "output", "text")


@dataclass(frozen=True)
class ImageUpload:
    """An image picked in the browser."""

    name: str
    content: bytes
    mime_type: str


@dataclass(frozen=True)
class Reply:
    """Outcome of one question.

    Attributes:
        text: The answer, or a user-facing message when ok is False.
        ok: True when text is an answer to reveal.
    """

    text: str
    ok: bool


def api_base_url() -> str:
    """Broker URL: API_BASE_URL if set, else this host on the server's PORT."""
    return os.getenv("API_BASE_URL") or f"http://localhost:{os.getenv('PORT', DEFAULT_PORT)}"


def extract_answer(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    for key in ANSWER_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return None


async def request_answer(
    prompt: str,
    image: ImageUpload | None = None,
    session_id: str | None = None,
    client: httpx.AsyncClient | None = None,
    base_url: str | None = None,
) -> Reply:
    """Post a question to /solve and interpret the response.

    Args:
        prompt: Question text.
        image: Optional image to attach.
        session_id: Optional session identifier.
        client: Optional HTTP client (a short-lived one is created otherwise).
        base_url: Broker base URL, used when no client is given
                  (defaults to api_base_url()).

    Returns:
        Reply with the answer or a user-facing error message.
    """
    prompt = prompt.strip()
    if not prompt and image is None:
        return Reply(NO_INPUT_MESSAGE, ok=False)

    data = {"prompt": prompt}
    if session_id:
        data["session_id"] = session_id
    files = None
    if image is not None:
        files = {"image": (image.name, image.content, image.mime_type)}

    try:
        if client is None:
            base_url = base_url or api_base_url()
            async with httpx.AsyncClient(base_url=base_url, timeout=120.0) as own:
                response = await own.post("/solve", data=data, files=files)
        else:
            response = await client.post("/solve", data=data, files=files)
    except httpx.RequestError as e:
        logger.warning(f"Request to broker failed: {e}")
        return Reply(NETWORK_ERROR_MESSAGE, ok=False)

    try:
        body = response.json()
    except ValueError:
        logger.warning(f"Broker returned a non-JSON body (HTTP {response.status_code})")
        return Reply(SERVER_ERROR_MESSAGE, ok=False)

    answer = extract_answer(body)
    if answer:
        return Reply(answer, ok=True)

    if not response.is_success and isinstance(body, dict) and isinstance(body.get("detail"), str):
        return Reply(f"⚠️ {body['detail']}", ok=False)
    return Reply(NO_ANSWER_MESSAGE, ok=False)
