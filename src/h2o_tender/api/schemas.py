"""Request and response models for the JSON API.

Weights cross this boundary in the user's preferred unit and are converted
to kilograms before reaching the services.
"""

from datetime import date

from pydantic import BaseModel

from h2o_tender.domain.daily_state import DailyState
from h2o_tender.domain.profile import (
    ActivityLevel,
    Climate,
    Profile,
    ProfileUpdate,
    WeightUnit,
)
from h2o_tender.domain.reminders import ReminderSlot, SkipOutcome
from h2o_tender.domain.units import format_volume, from_kilograms, to_kilograms
from h2o_tender.services.daily_state import DailyStateService


class ProfileIn(BaseModel):
    """Onboarding payload."""

    weight: float
    weight_unit: WeightUnit = WeightUnit.KG
    activity: ActivityLevel
    climate: Climate
    wake_time: str
    sleep_time: str
    reminder_frequency: int
    age: int | None = None
    location_name: str | None = None

    def weight_kg(self) -> float:
        """Weight converted to kilograms."""
        return to_kilograms(self.weight, self.weight_unit)


class ProfilePatch(BaseModel):
    """Settings update payload; omitted fields are left unchanged."""

    weight: float | None = None
    weight_unit: WeightUnit | None = None
    activity: ActivityLevel | None = None
    climate: Climate | None = None
    wake_time: str | None = None
    sleep_time: str | None = None
    reminder_frequency: int | None = None
    age: int | None = None
    location_name: str | None = None

    def to_update(self, current_unit: WeightUnit) -> ProfileUpdate:
        """Build a domain update, converting weight from the given unit."""
        unit = self.weight_unit or current_unit
        return ProfileUpdate(
            weight_kg=None if self.weight is None else to_kilograms(self.weight, unit),
            activity=self.activity,
            climate=self.climate,
            wake_time=self.wake_time,
            sleep_time=self.sleep_time,
            reminder_frequency=self.reminder_frequency,
            weight_unit=self.weight_unit,
            age=self.age,
            location_name=self.location_name,
        )


class ProfileOut(BaseModel):
    """Profile as shown to the user."""

    weight: float
    weight_unit: WeightUnit
    activity: ActivityLevel
    climate: Climate
    wake_time: str
    sleep_time: str
    reminder_frequency: int
    daily_goal_ml: int
    daily_goal: str
    age: int | None = None
    location_name: str | None = None

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileOut":
        """Build the response from a domain profile."""
        return cls(
            weight=from_kilograms(profile.weight_kg, profile.weight_unit),
            weight_unit=profile.weight_unit,
            activity=profile.activity,
            climate=profile.climate,
            wake_time=profile.wake_time,
            sleep_time=profile.sleep_time,
            reminder_frequency=int(profile.reminder_frequency),
            daily_goal_ml=profile.daily_goal_ml,
            daily_goal=format_volume(profile.daily_goal_ml, profile.weight_unit),
            age=profile.age,
            location_name=profile.location_name,
        )


class AmountIn(BaseModel):
    """A drink amount in milliliters."""

    amount_ml: int


class ReminderOut(BaseModel):
    """A reminder slot."""

    time: str
    amount_ml: int
    index: int

    @classmethod
    def from_slot(cls, slot: ReminderSlot) -> "ReminderOut":
        """Build the response from a reminder slot."""
        return cls(time=slot.time, amount_ml=slot.amount_ml, index=slot.index)


class DailyStateOut(BaseModel):
    """A day's ledger."""

    date: date
    consumed_ml: int
    remaining_ml: int
    reminders_completed: int
    reminders_skipped: int

    @classmethod
    def from_state(cls, state: DailyState) -> "DailyStateOut":
        """Build the response from a daily state."""
        return cls(
            date=state.day,
            consumed_ml=state.consumed_ml,
            remaining_ml=state.remaining_ml,
            reminders_completed=state.reminders_completed,
            reminders_skipped=state.reminders_skipped,
        )


class TodayOut(DailyStateOut):
    """Today's ledger with progress and reminder status."""

    goal_ml: int
    progress_percent: int
    reminders_in_sync: bool
    next_reminder: ReminderOut | None = None
    due_reminder: ReminderOut | None = None

    @classmethod
    def from_service(cls, service: DailyStateService) -> "TodayOut":
        """Build the response from the live daily state service."""
        state = service.state
        next_slot = service.next_reminder()
        due_slot = service.due_reminder()
        return cls(
            **DailyStateOut.from_state(state).model_dump(),
            goal_ml=service.profile.daily_goal_ml,
            progress_percent=service.progress(),
            reminders_in_sync=service.reminders_in_sync,
            next_reminder=ReminderOut.from_slot(next_slot) if next_slot else None,
            due_reminder=ReminderOut.from_slot(due_slot) if due_slot else None,
        )


class ScheduleOut(BaseModel):
    """Today's full plan and the reminders still ahead."""

    plan: list[ReminderOut]
    upcoming: list[ReminderOut]


class SkipOut(BaseModel):
    """Result of skipping a reminder."""

    today: TodayOut
    reminders_left: int
    amount_per_reminder_ml: int
    rescheduled: list[ReminderOut]
    reminders_synced: bool

    @classmethod
    def from_outcome(
        cls, outcome: SkipOutcome, service: DailyStateService
    ) -> "SkipOut":
        """Build the response from a skip outcome."""
        return cls(
            today=TodayOut.from_service(service),
            reminders_left=outcome.reminders_left,
            amount_per_reminder_ml=outcome.amount_per_reminder_ml,
            rescheduled=[ReminderOut.from_slot(slot) for slot in outcome.rescheduled],
            reminders_synced=outcome.reminders_synced,
        )


class HistoryOut(BaseModel):
    """Recent days, newest first."""

    days: list[DailyStateOut]
