"""Provider selection and fallback policy.

Decision order, first match wins:

1. An image is attached: ask Gemini about the image. No fallback; whatever
   it returns (possibly nothing) is the answer.
2. Text only: append the question to the conversation and ask Groq with
   the whole window. A successful answer is appended as an assistant turn.
3. Groq returned a non-success status (or no content): ask Gemini the bare
   question without conversation context. Nothing extractable means the
   AI is unavailable.

Transport failures (network errors, timeouts, undecodable bodies) are not
fallen back on; they raise TransportFailure.
"""

import logging
from dataclasses import dataclass

from shniro.broker.conversation import ConversationBuffer, Role
from shniro.broker.errors import ProviderUnavailable, TransportFailure
from shniro.broker.providers import GeminiProvider, GroqProvider, ProviderResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageInput:
    """Image bytes with their declared MIME type."""

    data: bytes
    mime_type: str


def _raise_on_transport_failure(provider: str, result: ProviderResult) -> None:
    if result.failed_in_transport:
        raise TransportFailure(f"{provider}: {result.status.value}: {result.error}")


class ProviderRouter:
    """Routes a question to exactly one successful provider path."""

    def __init__(self, gemini: GeminiProvider, groq: GroqProvider) -> None:
        self._gemini = gemini
        self._groq = groq

    async def route(
        self,
        question: str,
        image: ImageInput | None,
        conversation: ConversationBuffer,
    ) -> str | None:
        """Answer a question.

        Args:
            question: The user's question text.
            image: Optional attached image.
            conversation: Rolling context window, only used for text questions.

        Returns:
            The answer text. May be None for an image question the provider
            returned nothing for.

        Raises:
            TransportFailure: A provider call failed in transport.
            ProviderUnavailable: Neither text provider produced an answer.
        """
        if image is not None:
            return await self._answer_image(question, image)
        return await self._answer_text(question, conversation)

    async def _answer_image(self, question: str, image: ImageInput) -> str | None:
        logger.info(f"Routing image question to gemini ({image.mime_type})")
        result = await self._gemini.describe_image(image.data, image.mime_type, question)
        _raise_on_transport_failure("gemini", result)
        if not result.ok:
            logger.warning(f"Image provider returned HTTP {result.status_code}; no fallback")
        return result.text

    async def _answer_text(self, question: str, conversation: ConversationBuffer) -> str:
        conversation.add(Role.USER, question)

        logger.info(f"Routing text question to groq with {len(conversation)} turns")
        result = await self._groq.complete(conversation.as_messages())
        _raise_on_transport_failure("groq", result)

        if result.ok and result.text:
            conversation.add(Role.ASSISTANT, result.text)
            return result.text

        if result.ok:
            logger.warning("Primary provider answered without content; falling back")
        else:
            logger.warning(f"Primary provider returned HTTP {result.status_code}; falling back")

        fallback = await self._gemini.answer(question)
        _raise_on_transport_failure("gemini", fallback)
        if fallback.ok and fallback.text:
            return fallback.text

        raise ProviderUnavailable(
            f"groq status={result.status_code}, gemini status={fallback.status_code}"
        )
