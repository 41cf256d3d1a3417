"""Profile validation and construction."""

import math
from dataclasses import replace
from enum import Enum
from typing import TypeVar

from h2o_tender.domain.clock import (
    format_minutes_to_time,
    is_valid_time,
    parse_time_to_minutes,
)
from h2o_tender.domain.profile import (
    ActivityLevel,
    Climate,
    Profile,
    ProfileUpdate,
    ReminderFrequency,
    WeightUnit,
)
from h2o_tender.services.errors import ValidationError
from h2o_tender.services.hydration import calculate_daily_goal

MIN_WEIGHT_KG = 1
MAX_WEIGHT_KG = 500

_EnumT = TypeVar("_EnumT", bound=Enum)


def validate_weight(weight_kg: float) -> float:
    """Return the weight if it is within the accepted range."""
    if not math.isfinite(weight_kg) or not MIN_WEIGHT_KG <= weight_kg <= MAX_WEIGHT_KG:
        raise ValidationError(
            f"Weight must be between {MIN_WEIGHT_KG} and {MAX_WEIGHT_KG} kg, "
            f"got {weight_kg}"
        )
    return float(weight_kg)


def validate_time(value: str) -> str:
    """Return a normalized ``HH:MM`` string."""
    if not isinstance(value, str) or not is_valid_time(value):
        raise ValidationError(f"Time must be 24-hour HH:MM, got {value!r}")
    return format_minutes_to_time(parse_time_to_minutes(value.strip()))


def validate_frequency(value: int) -> ReminderFrequency:
    """Return the frequency if it is one of the supported intervals."""
    return _parse_choice(ReminderFrequency, value, "Reminder frequency")


def validate_amount(amount_ml: int) -> int:
    """Return a consumption amount if it is non-negative."""
    if amount_ml < 0:
        raise ValidationError(f"Amount must not be negative, got {amount_ml}")
    return int(amount_ml)


def create_profile(  # noqa: PLR0913
    *,
    weight_kg: float,
    activity: ActivityLevel | str,
    climate: Climate | str,
    wake_time: str,
    sleep_time: str,
    reminder_frequency: int,
    weight_unit: WeightUnit | str = WeightUnit.KG,
    age: int | None = None,
    location_name: str | None = None,
) -> Profile:
    """Validate onboarding input and build a profile with its computed goal."""
    weight = validate_weight(weight_kg)
    activity_level = _parse_choice(ActivityLevel, activity, "Activity")
    climate_type = _parse_choice(Climate, climate, "Climate")
    return Profile(
        weight_kg=weight,
        activity=activity_level,
        climate=climate_type,
        wake_time=validate_time(wake_time),
        sleep_time=validate_time(sleep_time),
        reminder_frequency=validate_frequency(reminder_frequency),
        daily_goal_ml=calculate_daily_goal(weight, climate_type, activity_level),
        weight_unit=_parse_choice(WeightUnit, weight_unit, "Weight unit"),
        age=age,
        location_name=location_name,
    )


def apply_profile_update(profile: Profile, update: ProfileUpdate) -> Profile:
    """Return a new profile with the update applied and the goal recomputed."""
    changes: dict[str, object] = {}
    if update.weight_kg is not None:
        changes["weight_kg"] = validate_weight(update.weight_kg)
    if update.activity is not None:
        changes["activity"] = _parse_choice(ActivityLevel, update.activity, "Activity")
    if update.climate is not None:
        changes["climate"] = _parse_choice(Climate, update.climate, "Climate")
    if update.wake_time is not None:
        changes["wake_time"] = validate_time(update.wake_time)
    if update.sleep_time is not None:
        changes["sleep_time"] = validate_time(update.sleep_time)
    if update.reminder_frequency is not None:
        changes["reminder_frequency"] = validate_frequency(update.reminder_frequency)
    if update.weight_unit is not None:
        changes["weight_unit"] = _parse_choice(
            WeightUnit, update.weight_unit, "Weight unit"
        )
    if update.age is not None:
        changes["age"] = update.age
    if update.location_name is not None:
        changes["location_name"] = update.location_name
    return with_computed_goal(replace(profile, **changes))


def with_computed_goal(profile: Profile) -> Profile:
    """Return the profile with ``daily_goal_ml`` re-derived from its inputs."""
    goal = calculate_daily_goal(profile.weight_kg, profile.climate, profile.activity)
    if goal == profile.daily_goal_ml:
        return profile
    return replace(profile, daily_goal_ml=goal)


def _parse_choice(enum_type: type[_EnumT], value: object, label: str) -> _EnumT:
    try:
        return enum_type(value)
    except ValueError as exc:
        allowed = ", ".join(str(item.value) for item in enum_type)
        raise ValidationError(
            f"{label} must be one of {allowed}, got {value!r}"
        ) from exc
