"""History of past daily states."""

import logging
from dataclasses import dataclass
from datetime import date

from h2o_tender.domain.daily_state import DailyState
from h2o_tender.services.daily_state import HydrationRepository
from h2o_tender.services.errors import PersistenceError

_logger = logging.getLogger(__name__)

DEFAULT_DAYS_TO_KEEP = 30


@dataclass
class HistoryService:
    """Service for listing and pruning saved daily states."""

    repository: HydrationRepository

    async def list_days(self) -> list[date]:
        """Return dates with a saved state, newest first."""
        try:
            days = await self.repository.list_daily_state_dates()
        except Exception as exc:
            _logger.exception("Failed to list daily states")
            raise PersistenceError("Failed to list daily states") from exc
        return sorted(days, reverse=True)

    async def list_states(self, limit: int = 7) -> list[DailyState]:
        """Return the most recent saved states, newest first."""
        states = []
        for day in (await self.list_days())[: max(limit, 0)]:
            try:
                state = await self.repository.load_daily_state(day)
            except Exception as exc:
                _logger.exception("Failed to load daily state for %s", day)
                raise PersistenceError(
                    f"Failed to load daily state for {day}"
                ) from exc
            if state is not None:
                states.append(state)
        return states

    async def cleanup(self, days_to_keep: int = DEFAULT_DAYS_TO_KEEP) -> int:
        """Delete all but the newest ``days_to_keep`` states; return the count."""
        stale = (await self.list_days())[max(days_to_keep, 0) :]
        for day in stale:
            try:
                await self.repository.delete_daily_state(day)
            except Exception as exc:
                _logger.exception("Failed to delete daily state for %s", day)
                raise PersistenceError(
                    f"Failed to delete daily state for {day}"
                ) from exc
        if stale:
            _logger.info("Cleaned up %s old daily states", len(stale))
        return len(stale)
