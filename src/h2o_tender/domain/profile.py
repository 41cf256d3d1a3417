"""Domain models for the user's hydration profile."""

from dataclasses import dataclass
from enum import Enum


class ActivityLevel(str, Enum):
    """Daily physical activity level."""

    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class Climate(str, Enum):
    """Climate the user lives in."""

    COLD = "cold"
    MILD = "mild"
    HOT = "hot"
    VERY_HOT = "veryHot"


class ReminderFrequency(int, Enum):
    """Minutes between two reminders."""

    EVERY_60_MINUTES = 60
    EVERY_90_MINUTES = 90


class WeightUnit(str, Enum):
    """Preferred unit system for display."""

    KG = "kg"
    LBS = "lbs"


@dataclass(frozen=True)
class Profile:
    """Long-lived user profile.

    Weight is always kilograms and the goal always milliliters; the display
    preference in ``weight_unit`` only matters at the presentation boundary.
    ``daily_goal_ml`` is a cached copy of the goal calculation.
    """

    weight_kg: float
    activity: ActivityLevel
    climate: Climate
    wake_time: str
    sleep_time: str
    reminder_frequency: ReminderFrequency
    daily_goal_ml: int
    weight_unit: WeightUnit = WeightUnit.KG
    age: int | None = None
    location_name: str | None = None


@dataclass(frozen=True)
class ProfileUpdate:
    """Partial settings update; ``None`` fields are left unchanged."""

    weight_kg: float | None = None
    activity: ActivityLevel | None = None
    climate: Climate | None = None
    wake_time: str | None = None
    sleep_time: str | None = None
    reminder_frequency: ReminderFrequency | None = None
    weight_unit: WeightUnit | None = None
    age: int | None = None
    location_name: str | None = None

