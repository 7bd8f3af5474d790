from __future__ import annotations

import math
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

"""
Exponential backoff for rate-limited requests.

A server hint in the Retry-After header always wins; without one the
delay starts at the base delay and doubles with every attempt.
"""


@dataclass
class Backoff:
    """
    Exponential backoff calculator.

    Computes retry delays that:
    - Follow the Retry-After header whenever the server sends one
    - Otherwise grow exponentially with each attempt (base * 2^attempt)
    - Are capped at a maximum delay (exponential delays only)
    - Optionally include random jitter

    Attributes:
        base_delay_seconds (float): Delay before the first retry
        max_delay_seconds (float): Maximum exponential delay
        jitter (float): Random variation factor (0.0-1.0)
    """

    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 60.0
    jitter: float = 0.0

    def compute_delay(
        self, attempt_index: int, retry_after: str | None = None
    ) -> float:
        """
        Calculate the delay before retry number ``attempt_index``.

        Args:
            attempt_index (int): Zero-based retry number
            retry_after (str | None): Raw Retry-After header value, if any

        Returns:
            float: Delay in seconds (always >= 0)
        """
        hinted = parse_retry_after(retry_after)
        if hinted is not None:
            return hinted

        delay = min(
            self.max_delay_seconds, self.base_delay_seconds * (2**attempt_index)
        )
        noise = delay * self.jitter * (2 * random.random() - 1)
        result: float = max(0.0, delay + noise)
        return result


def parse_retry_after(value: str | None) -> float | None:
    """
    Interpret a Retry-After header value.

    Accepts whole (or fractional) seconds and the HTTP-date form.

    Args:
        value (str | None): Header value

    Returns:
        float | None: Seconds to wait, or None when the header is absent or unreadable
    """
    if value is None or not value.strip():
        return None
    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        # "inf" and "nan" parse as floats but are not waits
        return max(0.0, seconds) if math.isfinite(seconds) else None
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())
