"""Background check that rolls the daily state over to the new day."""

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field

from h2o_tender.domain.clock import seconds_until_next_midnight
from h2o_tender.services.daily_state import DailyStateService
from h2o_tender.services.errors import HydrationError

_logger = logging.getLogger(__name__)

_MIDNIGHT_MARGIN_SECONDS = 1.0


@dataclass
class RolloverMonitor:
    """Periodically asks the daily state service whether the day changed.

    By default it polls every ``poll_interval_seconds``. With
    ``align_to_midnight`` it sleeps until just after the next local midnight
    instead. A failed or missed check only delays the rollover; the next
    check or the next state operation catches up.
    """

    daily_state_service: DailyStateService
    poll_interval_seconds: float = 60
    align_to_midnight: bool = False
    _task: "asyncio.Task[None] | None" = field(default=None, init=False, repr=False)

    @property
    def running(self) -> bool:
        """Return True while the background task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name="h2o-tender-rollover")

    async def stop(self) -> None:
        """Cancel the background loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def run(self) -> None:
        """Check for rollover forever."""
        while True:
            await asyncio.sleep(self.next_delay_seconds())
            await self.tick()

    async def tick(self) -> bool:
        """Run one rollover check; return True if a new day started."""
        try:
            return await self.daily_state_service.check_rollover()
        except HydrationError:
            _logger.exception("Daily rollover check failed")
            return False

    def next_delay_seconds(self) -> float:
        """Seconds to wait before the next check."""
        if self.align_to_midnight:
            now = self.daily_state_service.clock()
            return seconds_until_next_midnight(now) + _MIDNIGHT_MARGIN_SECONDS
        return self.poll_interval_seconds
