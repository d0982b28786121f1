"""Request/response schemas and the fixed user-facing messages."""

from pydantic import BaseModel, Field

DEFAULT_QUESTION = "Explain clearly."

RATE_LIMITED_MESSAGE = "⏳ Please slow down a little 🙂"
SERVER_ERROR_MESSAGE = "❌ Server error."
UNAVAILABLE_MESSAGE = "⚠️ AI unavailable."

NO_INPUT_MESSAGE = "⚠️ Please enter a question or upload an image."
NO_ANSWER_MESSAGE = "⚠️ No answer received."
NETWORK_ERROR_MESSAGE = "❌ Could not reach the server."
THINKING_MESSAGE = "⏳ Shniro is thinking..."


class SolveResponse(BaseModel):
    """Response from the /solve endpoint.

    Attributes:
        answer: The answer text. Null when an image provider returned nothing.
    """

    answer: str | None = Field(None, description="Answer text, possibly Markdown/LaTeX")
