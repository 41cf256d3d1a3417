"""Domain models for reminder slots and reminder actions."""

from dataclasses import dataclass
from enum import Enum

from h2o_tender.domain.daily_state import DailyState


@dataclass(frozen=True)
class ReminderSlot:
    """A single planned reminder."""

    time: str
    amount_ml: int
    index: int


class ReminderAction(str, Enum):
    """Actions a user can take on a delivered reminder."""

    DRINK = "drink"
    SKIP = "skip"


@dataclass(frozen=True)
class SkipOutcome:
    """Result of skipping a reminder."""

    state: DailyState
    reminders_left: int
    amount_per_reminder_ml: int
    rescheduled: list[ReminderSlot]
    reminders_synced: bool
