"""Daily state machine for consumption tracking and reminder scheduling."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Protocol

from h2o_tender.domain.clock import (
    format_minutes_to_time,
    is_reminder_time,
    minutes_of_day,
)
from h2o_tender.domain.daily_state import DailyState, fresh_daily_state
from h2o_tender.domain.profile import Profile, ProfileUpdate
from h2o_tender.domain.reminders import ReminderSlot, SkipOutcome
from h2o_tender.services.errors import (
    NotInitializedError,
    PersistenceError,
    ProfileMissingError,
    ReminderLimitError,
)
from h2o_tender.services.hydration import (
    calculate_progress,
    compute_reminder_schedule,
    redistribute_on_skip,
    upcoming_slots,
)
from h2o_tender.services.profiles import (
    apply_profile_update,
    validate_amount,
    with_computed_goal,
)

_logger = logging.getLogger(__name__)


class HydrationRepository(Protocol):
    """Persistence interface for the profile and daily states."""

    async def load_profile(self) -> Profile | None:
        """Return the saved profile, if onboarding was completed."""

    async def save_profile(self, profile: Profile) -> None:
        """Persist the profile."""

    async def load_daily_state(self, day: date) -> DailyState | None:
        """Return the saved state for a date, if present."""

    async def save_daily_state(self, state: DailyState) -> None:
        """Persist a daily state under its date."""

    async def list_daily_state_dates(self) -> list[date]:
        """Return dates with a saved state, newest first."""

    async def delete_daily_state(self, day: date) -> None:
        """Delete the saved state for a date."""


class ReminderTransport(Protocol):
    """Interface for the platform reminder scheduler."""

    async def schedule_all(self, reminders: list[ReminderSlot]) -> list[str]:
        """Schedule reminders and return their opaque ids."""

    async def cancel_all(self) -> None:
        """Cancel every pending reminder."""


@dataclass
class DailyStateService:
    """State machine owning the day's consumption ledger.

    The service starts uninitialized; ``load()`` or ``onboard()`` moves it to
    the active day and every other operation raises ``NotInitializedError``
    until then. Public coroutines are serialized with a lock so concurrent
    callers never interleave read-modify-write cycles on the ledger.

    Each operation builds a complete new ``DailyState``, applies it in memory,
    syncs reminders when needed and then awaits persistence. Reminder
    transport failures are logged and reported, never raised. Storage write
    failures raise ``PersistenceError`` with the in-memory state kept, so the
    caller can retry with ``save()``.
    """

    repository: HydrationRepository
    transport: ReminderTransport
    clock: Callable[[], datetime]
    reminders_in_sync: bool = field(default=True, init=False)
    _profile: Profile | None = field(default=None, init=False, repr=False)
    _state: DailyState | None = field(default=None, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    @property
    def is_initialized(self) -> bool:
        """Return True once the active day has been loaded."""
        return self._profile is not None and self._state is not None

    @property
    def profile(self) -> Profile:
        """Current profile."""
        if self._profile is None:
            raise NotInitializedError("Daily state has not been loaded")
        return self._profile

    @property
    def state(self) -> DailyState:
        """Current daily state."""
        if self._state is None:
            raise NotInitializedError("Daily state has not been loaded")
        return self._state

    async def load(self) -> DailyState:
        """Load the profile and today's state, starting a new day if needed."""
        async with self._lock:
            profile = await self._load_profile()
            return await self._activate(profile)

    async def refresh(self) -> DailyState:
        """Reload the profile and today's state from storage."""
        return await self.load()

    async def onboard(self, profile: Profile) -> DailyState:
        """Save the first profile and activate today's state."""
        async with self._lock:
            profile = with_computed_goal(profile)
            await self._save_profile(profile)
            return await self._activate(profile)

    async def current(self) -> DailyState:
        """Return today's state, rolling over first if the date changed."""
        async with self._lock:
            return await self._current_state()

    async def check_rollover(self) -> bool:
        """Start a new day if the stored date is no longer today."""
        async with self._lock:
            state = self.state
            today = self._today()
            if state.day == today:
                return False
            _logger.info("Rolling daily state over from %s to %s", state.day, today)
            await self._start_day(today)
            return True

    async def reset_day(self) -> DailyState:
        """Discard today's progress and start the day again."""
        async with self._lock:
            self._require_initialized()
            await self._start_day(self._today())
            return self.state

    async def record_consumption(self, amount_ml: int) -> DailyState:
        """Add a drink to today's ledger."""
        amount = validate_amount(amount_ml)
        async with self._lock:
            state = await self._current_state()
            await self._commit(self._with_consumed(state, amount))
            return self.state

    async def complete_reminder(self) -> DailyState:
        """Count a reminder as completed."""
        async with self._lock:
            state = await self._current_state()
            self._check_reminder_capacity(state)
            await self._commit(
                replace(state, reminders_completed=state.reminders_completed + 1)
            )
            return self.state

    async def record_reminder_drink(self, amount_ml: int) -> DailyState:
        """Handle "drink now" on a reminder: log the amount and complete it."""
        amount = validate_amount(amount_ml)
        async with self._lock:
            state = await self._current_state()
            self._check_reminder_capacity(state)
            updated = replace(
                self._with_consumed(state, amount),
                reminders_completed=state.reminders_completed + 1,
            )
            await self._commit(updated)
            return self.state

    async def skip_reminder(self) -> SkipOutcome:
        """Count a reminder as skipped and spread the rest of the goal."""
        async with self._lock:
            state = await self._current_state()
            self._check_reminder_capacity(state)
            updated = replace(state, reminders_skipped=state.reminders_skipped + 1)
            reminders_left, amount_ml, slots = self._redistribute(updated)
            synced = await self._commit(updated, reminders=slots)
            _logger.info(
                "Skipped reminder: %s reminders left at %s ml each",
                reminders_left,
                amount_ml,
            )
            return SkipOutcome(
                state=self.state,
                reminders_left=reminders_left,
                amount_per_reminder_ml=amount_ml,
                rescheduled=slots,
                reminders_synced=synced,
            )

    async def update_profile(self, update: ProfileUpdate) -> Profile:
        """Apply a settings change and keep today's state consistent with it."""
        async with self._lock:
            state = await self._current_state()
            previous = self.profile
            profile = apply_profile_update(previous, update)
            goal_changed = profile.daily_goal_ml != previous.daily_goal_ml
            schedule_changed = (
                profile.wake_time != previous.wake_time
                or profile.sleep_time != previous.sleep_time
                or profile.reminder_frequency != previous.reminder_frequency
            )
            if goal_changed:
                _logger.info(
                    "Daily goal changed from %s ml to %s ml",
                    previous.daily_goal_ml,
                    profile.daily_goal_ml,
                )

            self._profile = profile
            updated = self._within_plan(self._with_remaining(state))
            reminders = self.schedule() if goal_changed or schedule_changed else None
            await self._commit(updated, reminders=reminders, save_profile=True)
            return profile

    async def save(self) -> None:
        """Persist the current in-memory profile and state again."""
        async with self._lock:
            self._require_initialized()
            await self._save_profile(self.profile)
            await self._persist(self.state)

    def schedule(self) -> list[ReminderSlot]:
        """Return today's full reminder plan derived from the profile."""
        profile = self.profile
        return compute_reminder_schedule(
            profile.wake_time,
            profile.sleep_time,
            int(profile.reminder_frequency),
            profile.daily_goal_ml,
        )

    def upcoming_reminders(self) -> list[ReminderSlot]:
        """Return the reminders still expected today.

        Once a reminder was skipped, the remaining slots carry the
        redistributed amount.
        """
        state = self.state
        if state.reminders_skipped:
            return self._redistribute(state)[2]
        return self._upcoming(self.schedule())

    def next_reminder(self) -> ReminderSlot | None:
        """Return the next reminder still ahead of now, if any."""
        upcoming = self.upcoming_reminders()
        return upcoming[0] if upcoming else None

    def due_reminder(self, tolerance_minutes: int = 5) -> ReminderSlot | None:
        """Return the planned reminder within tolerance of the current time."""
        current_time = format_minutes_to_time(minutes_of_day(self.clock()))
        for slot in self.schedule():
            if is_reminder_time(slot.time, current_time, tolerance_minutes):
                return slot
        return None

    def progress(self) -> int:
        """Return today's progress toward the goal as a percentage."""
        return calculate_progress(self.state.consumed_ml, self.profile.daily_goal_ml)

    def _today(self) -> date:
        return self.clock().date()

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise NotInitializedError("Daily state has not been loaded")

    async def _current_state(self) -> DailyState:
        """Return the active state, rolling over first if the day changed."""
        state = self.state
        today = self._today()
        if state.day != today:
            _logger.info("Rolling daily state over from %s to %s", state.day, today)
            await self._start_day(today)
        return self.state

    async def _load_profile(self) -> Profile:
        try:
            profile = await self.repository.load_profile()
        except Exception as exc:
            _logger.exception("Failed to load profile")
            raise PersistenceError("Failed to load profile") from exc
        if profile is None:
            raise ProfileMissingError("No profile saved; onboarding is not complete")
        return with_computed_goal(profile)

    async def _activate(self, profile: Profile) -> DailyState:
        today = self._today()
        try:
            stored = await self.repository.load_daily_state(today)
        except Exception as exc:
            _logger.exception("Failed to load daily state for %s", today)
            raise PersistenceError(
                f"Failed to load daily state for {today}"
            ) from exc

        self._profile = profile
        if stored is None or stored.day != today:
            await self._start_day(today)
            return self.state

        restored = self._within_plan(self._with_remaining(stored))
        _logger.info(
            "Restored daily state for %s: consumed=%s ml", today, restored.consumed_ml
        )
        reminders = (
            self._redistribute(restored)[2]
            if restored.reminders_skipped
            else self.schedule()
        )
        await self._commit(restored, reminders=reminders)
        return self.state

    async def _start_day(self, today: date) -> None:
        state = fresh_daily_state(today, self.profile.daily_goal_ml)
        _logger.info(
            "Starting daily state for %s with goal %s ml",
            today,
            self.profile.daily_goal_ml,
        )
        await self._commit(state, reminders=self.schedule())

    def _with_consumed(self, state: DailyState, amount_ml: int) -> DailyState:
        consumed = state.consumed_ml + amount_ml
        return replace(
            state,
            consumed_ml=consumed,
            remaining_ml=max(0, self.profile.daily_goal_ml - consumed),
        )

    def _with_remaining(self, state: DailyState) -> DailyState:
        return self._with_consumed(state, 0)

    def _within_plan(self, state: DailyState) -> DailyState:
        """Trim answered counts to the plan size, dropping skips before completions."""
        excess = state.reminders_answered - len(self.schedule())
        if excess <= 0:
            return state
        skipped_cut = min(excess, state.reminders_skipped)
        _logger.info(
            "Plan shrank below %s answered reminders; dropping %s",
            state.reminders_answered,
            excess,
        )
        return replace(
            state,
            reminders_skipped=state.reminders_skipped - skipped_cut,
            reminders_completed=state.reminders_completed - (excess - skipped_cut),
        )

    def _check_reminder_capacity(self, state: DailyState) -> None:
        planned = len(self.schedule())
        if state.reminders_answered >= planned:
            raise ReminderLimitError(
                f"All {planned} planned reminders were already answered today"
            )

    def _upcoming(self, plan: list[ReminderSlot]) -> list[ReminderSlot]:
        profile = self.profile
        return upcoming_slots(
            plan, profile.wake_time, profile.sleep_time, minutes_of_day(self.clock())
        )

    def _redistribute(self, state: DailyState) -> tuple[int, int, list[ReminderSlot]]:
        """Return reminders left, the new per-reminder amount and their slots.

        Reminders left is what the plan still holds after answered reminders,
        bounded by the plan slots that are still ahead of now.
        """
        plan = self.schedule()
        upcoming = self._upcoming(plan)
        reminders_left = max(
            0, min(len(plan) - state.reminders_answered, len(upcoming))
        )
        amount_ml = redistribute_on_skip(
            self.profile.daily_goal_ml, state.consumed_ml, reminders_left
        )
        if amount_ml <= 0:
            return reminders_left, 0, []
        slots = [
            replace(slot, amount_ml=amount_ml) for slot in upcoming[:reminders_left]
        ]
        return reminders_left, amount_ml, slots

    async def _commit(
        self,
        state: DailyState,
        reminders: list[ReminderSlot] | None = None,
        *,
        save_profile: bool = False,
    ) -> bool:
        """Apply ``state`` in memory, sync reminders if given, then persist."""
        synced = True
        self._state = state
        if reminders is not None:
            self._state, synced = await self._sync_reminders(state, reminders)
        if save_profile:
            await self._save_profile(self.profile)
        await self._persist(self.state)
        return synced

    async def _sync_reminders(
        self, state: DailyState, reminders: list[ReminderSlot]
    ) -> tuple[DailyState, bool]:
        try:
            await self.transport.cancel_all()
        except Exception:
            _logger.exception("Failed to cancel scheduled reminders")
            self.reminders_in_sync = False
            return state, False
        state = replace(state, scheduled_reminder_ids=())
        if not reminders:
            self.reminders_in_sync = True
            return state, True
        try:
            reminder_ids = await self.transport.schedule_all(reminders)
        except Exception:
            _logger.exception("Failed to schedule %s reminders", len(reminders))
            self.reminders_in_sync = False
            return state, False
        self.reminders_in_sync = True
        return replace(state, scheduled_reminder_ids=tuple(reminder_ids)), True

    async def _persist(self, state: DailyState) -> None:
        try:
            await self.repository.save_daily_state(state)
        except Exception as exc:
            _logger.exception("Failed to save daily state for %s", state.day)
            raise PersistenceError(
                f"Failed to save daily state for {state.day}"
            ) from exc

    async def _save_profile(self, profile: Profile) -> None:
        try:
            await self.repository.save_profile(profile)
        except Exception as exc:
            _logger.exception("Failed to save profile")
            raise PersistenceError("Failed to save profile") from exc
