# ───────────────────────────────────────────────────────────────
#  meetbot/meetings/timer.py  —  single-shot re-armable reminder
# ───────────────────────────────────────────────────────────────
import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ReminderTimer:
    """One outstanding delayed callback at most.

    `arm()` always cancels the previous schedule first. A cancelled
    asyncio.TimerHandle is never run, so a reminder that was disarmed
    before the loop got to it cannot fire against newer state.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def active(self) -> bool:
        return self._handle is not None

    def arm(self, delay: float, callback: Callable[[], None]) -> None:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._fire, callback)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    disarm = cancel

    def _fire(self, callback: Callable[[], None]) -> None:
        self._handle = None
        try:
            callback()
        except Exception as exc:
            logger.exception(exc)
