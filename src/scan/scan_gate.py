"""Per-payload scan debouncing.

Camera layers fire decode callbacks repeatedly while a code stays in
frame. The gate admits a payload once and suppresses repeats of the same
value until its cooldown elapses; other payloads pass immediately.
"""

from __future__ import annotations

import time
from typing import Callable

from core.constants import DEFAULT_SCAN_COOLDOWN_MS
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


class ScanGate:
    """Cooldown filter for a stream of decoded payloads.

    Args:
        cooldown_ms: Window in which an identical payload is suppressed.
        clock: Millisecond clock used when ``admit`` gets no timestamp.
    """

    def __init__(
        self,
        cooldown_ms: float = DEFAULT_SCAN_COOLDOWN_MS,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        self._cooldown_ms = cooldown_ms
        self._clock = clock
        self.last_payload: str | None = None
        self.last_payload_timestamp: float | None = None

    @property
    def cooldown_ms(self) -> float:
        return self._cooldown_ms

    def now(self) -> float:
        return self._clock()

    def admit(self, payload: str, now: float | None = None) -> bool:
        """Decide whether a decoded payload should reach the matcher.

        Suppressed repeats do not extend the cooldown.

        Args:
            payload: Decoded payload string.
            now: Timestamp in milliseconds; defaults to the gate clock.

        Returns:
            True when admitted, False when suppressed.
        """
        timestamp = self.now() if now is None else now
        if (
            payload == self.last_payload
            and self.last_payload_timestamp is not None
            and timestamp - self.last_payload_timestamp < self._cooldown_ms
        ):
            _LOGGER.debug(
                "scan_suppressed",
                since_last_ms=round(timestamp - self.last_payload_timestamp, 1),
            )
            return False
        self.last_payload = payload
        self.last_payload_timestamp = timestamp
        return True

    def reset(self) -> None:
        self.last_payload = None
        self.last_payload_timestamp = None
