from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from loguru import logger

from ofsc.core.models import ThrottleConfig

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class CallThrottle:
    """
    Preemptive throttle counting the calls of one pass.

    Every ``every_n_calls``-th call is preceded by a fixed pause, whether or
    not the backend has complained. Create one per pass.
    """

    every_n_calls: int
    pause_seconds: float
    calls_made: int = 0

    @classmethod
    def start(cls, config: ThrottleConfig) -> "CallThrottle":
        return cls(config.every_n_calls, config.pause_seconds)

    async def before_call(self, sleep: Sleep) -> float:
        """Count one call and pause first if it is due. Returns the seconds paused."""
        self.calls_made += 1
        if self.every_n_calls <= 0 or self.calls_made % self.every_n_calls:
            return 0.0
        logger.warning(
            f"Waiting {self.pause_seconds:g}s after {self.calls_made} API calls "
            f"to avoid server rate limits"
        )
        await sleep(self.pause_seconds)
        return self.pause_seconds
