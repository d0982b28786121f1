"""Per-session broker state.

When session scoping is off every request resolves to the same shared
state, which is the single-tenant behavior of a personal deployment.

Scoped states are kept in least-recently-used order and capped at
``max_sessions``. When the cap is reached the oldest idle state (not locked,
outside its throttle window) is evicted. If every state is busy the request
falls back to the shared state, so rotating session ids cannot get past the
throttle.
"""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass, field

from shniro.broker.conversation import DEFAULT_HISTORY_LIMIT, ConversationBuffer
from shniro.broker.rate_limit import DEFAULT_INTERVAL_MS, RateLimiter

logger = logging.getLogger(__name__)

SHARED_SESSION_KEY = "shared"
DEFAULT_MAX_SESSIONS = 1000


@dataclass
class SessionState:
    """Mutable state owned by one session."""

    limiter: RateLimiter
    conversation: ConversationBuffer
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def is_idle(self, now: float | None) -> bool:
        if self.lock.locked():
            return False
        return now is None or self.limiter.is_idle(now)


class SessionStore:
    """Bounded map of session key to SessionState, created on first use."""

    def __init__(
        self,
        scoped: bool = False,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        rate_limit_interval_ms: int = DEFAULT_INTERVAL_MS,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.scoped = scoped
        self.history_limit = history_limit
        self.rate_limit_interval_ms = rate_limit_interval_ms
        self.max_sessions = max_sessions
        self._shared: SessionState | None = None
        self._sessions: OrderedDict[str, SessionState] = OrderedDict()

    def key_for(self, session_id: str | None) -> str:
        """Resolve the state key for a client-supplied session id."""
        if not self.scoped or not session_id:
            return SHARED_SESSION_KEY
        return session_id

    def _new_state(self) -> SessionState:
        return SessionState(
            limiter=RateLimiter(self.rate_limit_interval_ms),
            conversation=ConversationBuffer(self.history_limit),
        )

    def _shared_state(self) -> SessionState:
        if self._shared is None:
            self._shared = self._new_state()
        return self._shared

    def _evict_idle(self, now: float | None) -> bool:
        for key, state in self._sessions.items():
            if state.is_idle(now):
                del self._sessions[key]
                logger.debug(f"Evicted session state: {key}")
                return True
        return False

    def get(self, session_id: str | None, now: float | None = None) -> SessionState:
        """Return the state for a session, creating it if needed.

        Args:
            session_id: Client-supplied session id.
            now: Current time in milliseconds, used to tell idle states apart
                 when one has to be evicted. Without it any unlocked state
                 may be evicted.
        """
        if not self.scoped or not session_id:
            return self._shared_state()

        state = self._sessions.get(session_id)
        if state is not None:
            self._sessions.move_to_end(session_id)
            return state

        if len(self._sessions) >= self.max_sessions and not self._evict_idle(now):
            logger.warning(
                f"All {self.max_sessions} sessions busy; {session_id} uses shared state"
            )
            return self._shared_state()

        state = self._new_state()
        self._sessions[session_id] = state
        logger.debug(f"Created session state: {session_id}")
        return state

    def __len__(self) -> int:
        return len(self._sessions) + (self._shared is not None)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
