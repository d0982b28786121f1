"""Rolling conversation window used as context for text completions."""

from collections import deque
from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_HISTORY_LIMIT = 6


class Role(str, Enum):
    """Speaker of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ConversationTurn(BaseModel):
    """A single immutable turn in the conversation.

    Attributes:
        role: Who spoke (user or assistant).
        content: The message text.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: Role = Field(..., description="Message role: 'user' or 'assistant'")
    content: str = Field(..., description="The message content")


class ConversationBuffer:
    """Capacity-bounded FIFO of conversation turns.

    Appending past capacity evicts the oldest turns, so the buffer always
    holds the most recent ``capacity`` turns in their original order.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_LIMIT) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._turns: deque[ConversationTurn] = deque(maxlen=capacity)

    def append(self, turn: ConversationTurn) -> None:
        self._turns.append(turn)

    def add(self, role: Role, content: str) -> ConversationTurn:
        """Create a turn and append it."""
        turn = ConversationTurn(role=role, content=content)
        self.append(turn)
        return turn

    def snapshot(self) -> list[ConversationTurn]:
        """Return the retained turns, oldest first."""
        return list(self._turns)

    def as_messages(self) -> list[dict[str, str]]:
        """Return the turns as chat-completion messages."""
        return [turn.model_dump() for turn in self._turns]

    def clear(self) -> None:
        self._turns.clear()

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(self.snapshot())
