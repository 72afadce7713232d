"""Per-game countdown that forces finalization when it runs out."""
import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Countdown:
    """Counts down in ticks on the running event loop.

    ``on_expire`` runs once when the time is up. ``cancel`` may be called
    any number of times; only the first call on a live countdown does
    anything.
    """

    def __init__(
        self,
        duration: float,
        on_expire: Callable[[], Any],
        on_tick: Optional[Callable[[float], Any]] = None,
        interval: float = 1.0,
    ):
        self.duration = duration
        self.remaining = duration
        self.interval = interval
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._task: Optional[asyncio.Task] = None
        self.expired = False
        self.cancelled = False

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while self.remaining > 0:
            if self._on_tick:
                self._on_tick(self.remaining)
            await asyncio.sleep(min(self.interval, self.remaining))
            self.remaining = max(0, self.remaining - self.interval)
        self.expired = True
        logger.debug("Countdown expired")
        self._on_expire()

    def cancel(self) -> bool:
        """Stop the countdown; returns False when there was nothing to stop."""
        if self.cancelled or self._task is None or self._task.done():
            return False
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if self._task is current:
            # expiry callback finalizing the game; the task ends on its own
            self.cancelled = True
            return False
        self._task.cancel()
        self.cancelled = True
        return True
