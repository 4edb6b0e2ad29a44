"""
Inactivity timer: ends the authenticated session after a fixed idle period.
"""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ACTIVITY_SIGNALS = frozenset({"mousemove", "mousedown", "keypress", "scroll", "touchstart"})


class InactivityTimer:
    """
    Event-loop timer owned by one session.

    ``start()``/``reset()`` (re)arm the countdown, ``cancel()`` disarms it.
    When the countdown expires ``on_timeout`` runs exactly once for that
    arming.
    """

    def __init__(self, timeout_seconds: float, on_timeout: Callable[[], None]):
        self.timeout_seconds = timeout_seconds
        self.on_timeout = on_timeout
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.timeout_seconds, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def record_activity(self, signal: str) -> bool:
        """Reset the countdown for a recognized signal while armed."""
        if signal not in ACTIVITY_SIGNALS or not self.armed:
            return False
        self.reset()
        return True

    def _fire(self) -> None:
        self._handle = None
        logger.info("Inactivity timeout after %.0fs", self.timeout_seconds)
        self.on_timeout()
