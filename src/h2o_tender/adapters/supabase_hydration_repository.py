"""Supabase repository for the profile and daily states.

Values are stored as JSON documents in a single key-value table:
``@h2o_tender:settings`` holds the profile and
``@h2o_tender:daily_state:<YYYY-MM-DD>`` holds one daily state per date.
"""

import asyncio
from dataclasses import dataclass
from datetime import UTC, date, datetime

from supabase import Client

from h2o_tender.domain.clock import date_key
from h2o_tender.domain.daily_state import DailyState
from h2o_tender.domain.profile import (
    ActivityLevel,
    Climate,
    Profile,
    ReminderFrequency,
    WeightUnit,
)
from h2o_tender.services.daily_state import HydrationRepository

KEY_PREFIX = "@h2o_tender:"
SETTINGS_KEY = f"{KEY_PREFIX}settings"
DAILY_STATE_PREFIX = f"{KEY_PREFIX}daily_state:"


@dataclass
class SupabaseHydrationRepository(HydrationRepository):
    """Supabase implementation of hydration persistence."""

    client: Client
    table: str = "hydration_store"

    async def load_profile(self) -> Profile | None:
        """Return the saved profile."""
        value = await asyncio.to_thread(self._get, SETTINGS_KEY)
        if value is None:
            return None
        return profile_from_document(value)

    async def save_profile(self, profile: Profile) -> None:
        """Upsert the profile document."""
        await asyncio.to_thread(self._put, SETTINGS_KEY, profile_to_document(profile))

    async def load_daily_state(self, day: date) -> DailyState | None:
        """Return the saved state for a date."""
        value = await asyncio.to_thread(self._get, _daily_state_key(day))
        if value is None:
            return None
        return daily_state_from_document(value)

    async def save_daily_state(self, state: DailyState) -> None:
        """Upsert the state document for its date."""
        await asyncio.to_thread(
            self._put, _daily_state_key(state.day), daily_state_to_document(state)
        )

    async def list_daily_state_dates(self) -> list[date]:
        """Return dates with a saved state, newest first."""
        rows = await asyncio.to_thread(self._list_keys, DAILY_STATE_PREFIX)
        days = []
        for key in rows:
            try:
                days.append(date.fromisoformat(key.removeprefix(DAILY_STATE_PREFIX)))
            except ValueError:
                continue
        return sorted(days, reverse=True)

    async def delete_daily_state(self, day: date) -> None:
        """Delete the state document for a date."""
        await asyncio.to_thread(self._delete, _daily_state_key(day))

    def _get(self, key: str) -> dict[str, object] | None:
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    def _put(self, key: str, value: dict[str, object]) -> None:
        self.client.table(self.table).upsert(
            {
                "key": key,
                "value": value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="key",
        ).execute()

    def _list_keys(self, prefix: str) -> list[str]:
        response = (
            self.client.table(self.table)
            .select("key")
            .like("key", f"{prefix}%")
            .execute()
        )
        return [str(row["key"]) for row in response.data or []]

    def _delete(self, key: str) -> None:
        self.client.table(self.table).delete().eq("key", key).execute()


def _daily_state_key(day: date) -> str:
    return f"{DAILY_STATE_PREFIX}{date_key(day)}"


def profile_to_document(profile: Profile) -> dict[str, object]:
    """Serialize a profile to its stored JSON document."""
    return {
        "weight": profile.weight_kg,
        "weightUnit": profile.weight_unit.value,
        "activity": profile.activity.value,
        "climate": profile.climate.value,
        "wakeTime": profile.wake_time,
        "sleepTime": profile.sleep_time,
        "reminderFrequency": profile.reminder_frequency.value,
        "dailyGoalML": profile.daily_goal_ml,
        "age": profile.age,
        "locationName": profile.location_name,
    }


def profile_from_document(document: dict[str, object]) -> Profile:
    """Build a profile from a stored JSON document."""
    return Profile(
        weight_kg=float(document["weight"]),
        activity=ActivityLevel(document["activity"]),
        climate=Climate(document["climate"]),
        wake_time=str(document["wakeTime"]),
        sleep_time=str(document["sleepTime"]),
        reminder_frequency=ReminderFrequency(int(document["reminderFrequency"])),
        daily_goal_ml=int(document.get("dailyGoalML", 0)),
        weight_unit=WeightUnit(document.get("weightUnit") or WeightUnit.KG.value),
        age=document.get("age"),
        location_name=document.get("locationName"),
    )


def daily_state_to_document(state: DailyState) -> dict[str, object]:
    """Serialize a daily state to its stored JSON document."""
    return {
        "date": date_key(state.day),
        "consumedML": state.consumed_ml,
        "remainingML": state.remaining_ml,
        "remindersCompleted": state.reminders_completed,
        "remindersSkipped": state.reminders_skipped,
        "scheduledReminderIds": list(state.scheduled_reminder_ids),
    }


def daily_state_from_document(document: dict[str, object]) -> DailyState:
    """Build a daily state from a stored JSON document."""
    return DailyState(
        day=date.fromisoformat(str(document["date"])),
        consumed_ml=max(0, int(document.get("consumedML", 0))),
        remaining_ml=max(0, int(document.get("remainingML", 0))),
        reminders_completed=int(document.get("remindersCompleted", 0)),
        reminders_skipped=int(document.get("remindersSkipped", 0)),
        scheduled_reminder_ids=tuple(document.get("scheduledReminderIds") or ()),
    )
