"""Domain models for the per-day consumption ledger."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class DailyState:
    """Consumption ledger for one calendar date."""

    day: date
    consumed_ml: int = 0
    remaining_ml: int = 0
    reminders_completed: int = 0
    reminders_skipped: int = 0
    scheduled_reminder_ids: tuple[str, ...] = ()

    @property
    def reminders_answered(self) -> int:
        """Reminders the user already completed or skipped today."""
        return self.reminders_completed + self.reminders_skipped


def fresh_daily_state(day: date, daily_goal_ml: int) -> DailyState:
    """Return an empty ledger for a new day."""
    return DailyState(day=day, remaining_ml=max(0, daily_goal_ml))
