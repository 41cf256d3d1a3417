"""Tests for goal, schedule and redistribution calculations."""

import pytest

from h2o_tender.domain.profile import ActivityLevel, Climate
from h2o_tender.services.hydration import (
    awake_duration_minutes,
    calculate_daily_goal,
    calculate_progress,
    compute_reminder_schedule,
    redistribute_on_skip,
    round_to_step,
    upcoming_slots,
)


def test_daily_goal_for_mild_light() -> None:
    assert calculate_daily_goal(70, Climate.MILD, ActivityLevel.LIGHT) == 2440


def test_daily_goal_for_hot_heavy() -> None:
    assert calculate_daily_goal(70, Climate.HOT, ActivityLevel.HEAVY) == 3340


def test_daily_goal_applies_cold_adjustment() -> None:
    assert calculate_daily_goal(60, Climate.COLD, ActivityLevel.NONE) == 1720


@pytest.mark.parametrize("weight", [1, 1.5, 33.3, 64.2, 70, 99.99, 250.05, 500])
@pytest.mark.parametrize("climate", list(Climate))
@pytest.mark.parametrize("activity", list(ActivityLevel))
def test_daily_goal_is_multiple_of_ten(
    weight: float, climate: Climate, activity: ActivityLevel
) -> None:
    goal = calculate_daily_goal(weight, climate, activity)

    assert goal % 10 == 0
    assert goal == calculate_daily_goal(weight, climate, activity)


def test_round_to_step_rounds_halves_up() -> None:
    assert round_to_step(5) == 10
    assert round_to_step(4.9) == 0
    assert round_to_step(-5) == 0
    assert round_to_step(1835) == 1840


def test_schedule_spans_awake_window() -> None:
    slots = compute_reminder_schedule("07:00", "22:00", 60, 2440)

    assert len(slots) == 15
    assert [slot.time for slot in slots[:3]] == ["07:00", "08:00", "09:00"]
    assert slots[-1].time == "21:00"
    assert [slot.index for slot in slots] == list(range(15))
    assert {slot.amount_ml for slot in slots} == {160}


def test_schedule_total_stays_within_rounding_slack() -> None:
    slots = compute_reminder_schedule("06:30", "23:15", 90, 3340)

    total = sum(slot.amount_ml for slot in slots)
    assert len(slots) == 11
    assert abs(total - 3340) <= 10 * len(slots)


def test_schedule_wraps_past_midnight() -> None:
    slots = compute_reminder_schedule("22:00", "06:00", 60, 2000)

    assert awake_duration_minutes("22:00", "06:00") == 480
    assert [slot.time for slot in slots] == [
        "22:00",
        "23:00",
        "00:00",
        "01:00",
        "02:00",
        "03:00",
        "04:00",
        "05:00",
    ]
    assert slots[0].amount_ml == 250


def test_schedule_is_empty_when_window_shorter_than_interval() -> None:
    assert compute_reminder_schedule("07:00", "07:45", 60, 2440) == []


def test_schedule_equal_wake_and_sleep_covers_full_day() -> None:
    slots = compute_reminder_schedule("08:00", "08:00", 90, 2400)

    assert len(slots) == 16
    assert slots[-1].time == "06:30"


def test_schedule_is_idempotent() -> None:
    first = compute_reminder_schedule("07:15", "21:40", 90, 2760)
    second = compute_reminder_schedule("07:15", "21:40", 90, 2760)

    assert first == second


def test_redistribution_concentrates_remaining_goal() -> None:
    assert redistribute_on_skip(2440, 600, 3) == 610


def test_redistribution_is_zero_without_reminders_left() -> None:
    assert redistribute_on_skip(2440, 600, 0) == 0


def test_redistribution_is_zero_when_goal_met() -> None:
    assert redistribute_on_skip(2440, 2440, 4) == 0
    assert redistribute_on_skip(2440, 3000, 4) == 0


def test_progress_is_capped_and_handles_zero_goal() -> None:
    assert calculate_progress(1220, 2440) == 50
    assert calculate_progress(5000, 2440) == 100
    assert calculate_progress(100, 0) == 0


def test_upcoming_slots_in_daytime_window() -> None:
    plan = compute_reminder_schedule("07:00", "22:00", 60, 2440)

    assert len(upcoming_slots(plan, "07:00", "22:00", 6 * 60 + 30)) == 15
    assert [
        slot.time for slot in upcoming_slots(plan, "07:00", "22:00", 19 * 60 + 30)
    ] == ["20:00", "21:00"]
    assert upcoming_slots(plan, "07:00", "22:00", 22 * 60 + 30) == []


def test_upcoming_slots_follow_wake_order_across_midnight() -> None:
    plan = compute_reminder_schedule("22:00", "06:00", 60, 2400)

    late_evening = upcoming_slots(plan, "22:00", "06:00", 23 * 60 + 30)
    after_midnight = upcoming_slots(plan, "22:00", "06:00", 60)

    assert [slot.time for slot in late_evening][0] == "00:00"
    assert len(late_evening) == 6
    assert [slot.time for slot in after_midnight] == [
        "02:00",
        "03:00",
        "04:00",
        "05:00",
    ]
    assert len(upcoming_slots(plan, "22:00", "06:00", 12 * 60)) == 8
