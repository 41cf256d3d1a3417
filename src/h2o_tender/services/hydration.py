"""Hydration goal, reminder schedule and skip redistribution.

These are pure functions over pre-validated input. They never raise for
in-contract values and always return the same output for the same input.
"""

import math

from h2o_tender.domain.clock import (
    MINUTES_PER_DAY,
    format_minutes_to_time,
    parse_time_to_minutes,
)
from h2o_tender.domain.profile import ActivityLevel, Climate
from h2o_tender.domain.reminders import ReminderSlot

BASE_ML_PER_KG = 32
ROUNDING_STEP_ML = 10

CLIMATE_ADJUSTMENTS_ML = {
    Climate.COLD: -200,
    Climate.MILD: 0,
    Climate.HOT: 300,
    Climate.VERY_HOT: 500,
}

ACTIVITY_ADJUSTMENTS_ML = {
    ActivityLevel.NONE: 0,
    ActivityLevel.LIGHT: 200,
    ActivityLevel.MODERATE: 500,
    ActivityLevel.HEAVY: 800,
}


def round_to_step(value: float, step: int = ROUNDING_STEP_ML) -> int:
    """Round to the nearest multiple of ``step``; halves round up."""
    return int(math.floor(value / step + 0.5)) * step


def calculate_daily_goal(
    weight_kg: float, climate: Climate, activity: ActivityLevel
) -> int:
    """Return the daily hydration goal in milliliters.

    base = weight * 32 ml/kg, plus the climate and activity adjustments,
    snapped to the nearest 10 ml. Weight must already be within 1-500 kg.
    """
    total = (
        weight_kg * BASE_ML_PER_KG
        + CLIMATE_ADJUSTMENTS_ML[climate]
        + ACTIVITY_ADJUSTMENTS_ML[activity]
    )
    return round_to_step(total)


def awake_duration_minutes(wake_time: str, sleep_time: str) -> int:
    """Length of the awake window; a sleep time at or before wake crosses midnight."""
    wake_minutes = parse_time_to_minutes(wake_time)
    sleep_minutes = parse_time_to_minutes(sleep_time)
    if sleep_minutes <= wake_minutes:
        sleep_minutes += MINUTES_PER_DAY
    return sleep_minutes - wake_minutes


def count_reminders(wake_time: str, sleep_time: str, frequency: int) -> int:
    """Number of reminders that fit in the awake window."""
    return awake_duration_minutes(wake_time, sleep_time) // frequency


def compute_reminder_schedule(
    wake_time: str, sleep_time: str, frequency: int, daily_goal_ml: int
) -> list[ReminderSlot]:
    """Split the day's goal into evenly spaced reminders starting at wake time.

    Returns an empty list when the awake window is shorter than one interval.
    """
    reminder_count = count_reminders(wake_time, sleep_time, frequency)
    if reminder_count <= 0:
        return []

    amount_ml = round_to_step(daily_goal_ml / reminder_count)
    wake_minutes = parse_time_to_minutes(wake_time)
    return [
        ReminderSlot(
            time=format_minutes_to_time(
                (wake_minutes + index * frequency) % MINUTES_PER_DAY
            ),
            amount_ml=amount_ml,
            index=index,
        )
        for index in range(reminder_count)
    ]


def upcoming_slots(
    plan: list[ReminderSlot], wake_time: str, sleep_time: str, now_minutes: int
) -> list[ReminderSlot]:
    """Return the plan slots strictly after ``now_minutes`` in the awake window.

    Slots are compared by their offset from wake time, so a window crossing
    midnight keeps its after-midnight slots ahead of its evening ones. Before
    wake, the whole plan is ahead, unless ``now_minutes`` falls in the
    after-midnight tail of a window that started the previous evening.
    """
    wake_minutes = parse_time_to_minutes(wake_time)
    sleep_minutes = parse_time_to_minutes(sleep_time)
    elapsed = now_minutes - wake_minutes
    if elapsed < 0:
        crosses_midnight = sleep_minutes <= wake_minutes
        if not crosses_midnight or now_minutes >= sleep_minutes:
            return list(plan)
        elapsed += MINUTES_PER_DAY
    return [
        slot
        for slot in plan
        if (parse_time_to_minutes(slot.time) - wake_minutes) % MINUTES_PER_DAY
        > elapsed
    ]


def redistribute_on_skip(
    total_goal_ml: int, consumed_ml: int, reminders_left: int
) -> int:
    """Spread what is left of the original goal over the remaining reminders.

    Returns 0 when no reminders are left or the goal is already met.
    """
    remaining_ml = total_goal_ml - consumed_ml
    if reminders_left <= 0 or remaining_ml <= 0:
        return 0
    return round_to_step(remaining_ml / reminders_left)


def calculate_progress(consumed_ml: int, goal_ml: int) -> int:
    """Return progress toward the goal as a percentage capped at 100."""
    if goal_ml <= 0:
        return 0
    progress = consumed_ml / goal_ml * 100
    return min(int(math.floor(progress + 0.5)), 100)
