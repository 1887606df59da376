"""
Reconnect Policy - Decides what happens after the WhatsApp session closes.

Single Responsibility: map a close reason and the number of consecutive failed
attempts to a retry decision. Holds no state; the coordinator owns the counter.
"""

import logging
from dataclasses import dataclass, field

from wagate.domain.events.lifecycle_events import CloseReason

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconnectionConfig:
    """Configuration for reconnection behavior."""

    base_delay: float = 5
    max_delay: float = 5
    max_attempts: int | None = None


@dataclass(frozen=True)
class ReconnectDecision:
    """Outcome of the policy for one close event."""

    retry: bool
    delay: float = 0.0
    terminal: bool = False

    @classmethod
    def stop(cls, terminal: bool) -> "ReconnectDecision":
        return cls(retry=False, terminal=terminal)


@dataclass(frozen=True)
class ReconnectPolicy:
    """
    Reconnect decision over a close reason.

    Rules:
        - An explicit logout (status 401) is the only terminal close.
        - Every other close is retried after a delay.
        - Delay grows exponentially from base_delay, capped at max_delay.
          With max_delay == base_delay (the default) the delay is fixed.
        - Once max_attempts consecutive retries failed, stop retrying
          without treating the session as logged out.

    Algorithm:
        delay = min(base_delay * (2 ^ (attempt - 1)), max_delay)

    Example progression (base_delay=5, max_delay=60):
        Attempt 1: 5s
        Attempt 2: 10s
        Attempt 3: 20s
        Attempt 4: 40s
        Attempt 5+: 60s (capped)
    """

    config: ReconnectionConfig = field(default_factory=ReconnectionConfig)

    def decide(self, reason: CloseReason, attempt: int) -> ReconnectDecision:
        """
        Decide whether to reconnect.

        Args:
            reason: Close reason reported by the protocol client
            attempt: 1-based number of the retry this decision would schedule

        Returns:
            ReconnectDecision with retry flag and delay in seconds
        """
        if reason.is_logged_out:
            return ReconnectDecision.stop(terminal=True)

        if self.config.max_attempts is not None and attempt > self.config.max_attempts:
            logger.warning(
                "Max reconnection attempts reached (%d), giving up",
                self.config.max_attempts,
            )
            return ReconnectDecision.stop(terminal=False)

        return ReconnectDecision(retry=True, delay=self.calculate_delay(attempt))

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay for a reconnection attempt.

        Returns:
            Delay in seconds
        """
        if attempt <= 1:
            return self.config.base_delay

        exponential = self.config.base_delay * (2 ** (attempt - 1))
        return min(exponential, self.config.max_delay)
