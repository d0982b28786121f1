"""Minimum-interval request throttle."""

import logging

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 1200


class RateLimiter:
    """Rejects a request arriving within ``interval_ms`` of the last accepted one.

    Timestamps are plain milliseconds supplied by the caller so the limiter
    stays independent of any particular clock.
    """

    def __init__(self, interval_ms: int = DEFAULT_INTERVAL_MS) -> None:
        self.interval_ms = interval_ms
        self.last_accepted: float | None = None

    def admit(self, now: float) -> bool:
        """Admit a request at time ``now`` (milliseconds).

        Returns:
            True and records ``now`` if enough time has passed, False otherwise.
        """
        if self.last_accepted is not None and now - self.last_accepted < self.interval_ms:
            logger.debug(f"Rejected request {now - self.last_accepted:.0f}ms after last")
            return False
        self.last_accepted = now
        return True

    def is_idle(self, now: float) -> bool:
        """True when a request at ``now`` would be admitted."""
        return self.last_accepted is None or now - self.last_accepted >= self.interval_ms
