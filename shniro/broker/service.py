"""Broker service: session state, throttling and routing behind one call.

The service is the single place where broker failures are collapsed into
the fixed user-facing answers; nothing structured crosses the API boundary.
"""

import logging
import time
from collections.abc import Callable

import httpx

from shniro.broker.config import BrokerConfig, get_broker_config
from shniro.broker.errors import BrokerError, ProviderUnavailable
from shniro.broker.providers import GeminiProvider, GroqProvider
from shniro.broker.router import ImageInput, ProviderRouter
from shniro.broker.sessions import SessionStore
from shniro.models.schemas import (
    RATE_LIMITED_MESSAGE,
    SERVER_ERROR_MESSAGE,
    UNAVAILABLE_MESSAGE,
)

logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class BrokerService:
    """Answers questions on behalf of the /solve endpoint.

    Owns:
    - one shared httpx client for all outbound provider calls
    - the session store (shared or per-session conversation and throttle)
    - the provider router
    """

    def __init__(
        self,
        config: BrokerConfig | None = None,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        """Initialize the broker service.

        Args:
            config: Optional broker configuration.
                    Loads from environment if not provided.
            client: Optional HTTP client for provider calls.
            clock: Millisecond clock used for rate limiting.
        """
        self._config = config or get_broker_config()
        self._client = client or httpx.AsyncClient(timeout=self._config.provider_timeout)
        self._clock = clock
        self.sessions = SessionStore(
            scoped=self._config.session_scoped,
            history_limit=self._config.history_limit,
            rate_limit_interval_ms=self._config.rate_limit_interval_ms,
            max_sessions=self._config.max_sessions,
        )
        self.router = ProviderRouter(
            gemini=GeminiProvider(self._client, self._config),
            groq=GroqProvider(self._client, self._config),
        )

    @property
    def config(self) -> BrokerConfig:
        return self._config

    async def solve(
        self,
        question: str,
        image: ImageInput | None = None,
        session_id: str | None = None,
    ) -> str | None:
        """Answer a question, optionally about an image.

        Args:
            question: The user's question.
            image: Optional attached image.
            session_id: Client session identifier (ignored unless session scoping is on).

        Returns:
            The answer or one of the fixed user-facing messages.
        """
        now = self._clock()
        state = self.sessions.get(session_id, now)
        if not state.limiter.admit(now):
            logger.info(f"Rate limited session {self.sessions.key_for(session_id)}")
            return RATE_LIMITED_MESSAGE

        async with state.lock:
            try:
                return await self.router.route(question, image, state.conversation)
            except ProviderUnavailable as e:
                logger.warning(f"AI unavailable: {e}")
                return UNAVAILABLE_MESSAGE
            except BrokerError as e:
                logger.error(f"Provider call failed: {e}")
                return SERVER_ERROR_MESSAGE
            except Exception:
                logger.exception("Unexpected error while answering")
                return SERVER_ERROR_MESSAGE

    async def aclose(self) -> None:
        await self._client.aclose()


# Module-level singleton instance
_broker_service: BrokerService | None = None


def get_broker_service() -> BrokerService:
    """Get or create the global broker service.

    Returns:
        The BrokerService instance.
    """
    global _broker_service
    if _broker_service is None:
        _broker_service = BrokerService()
    return _broker_service


async def close_broker_service() -> None:
    """Close the global broker service if it was created."""
    global _broker_service
    if _broker_service is not None:
        await _broker_service.aclose()
        _broker_service = None
