"""Tests for the Supabase hydration repository."""

import asyncio
from dataclasses import dataclass, field
from datetime import date

from h2o_tender.adapters.supabase_hydration_repository import (
    DAILY_STATE_PREFIX,
    SETTINGS_KEY,
    SupabaseHydrationRepository,
    daily_state_from_document,
    profile_from_document,
    profile_to_document,
)
from h2o_tender.domain.daily_state import DailyState
from h2o_tender.domain.profile import Climate, WeightUnit
from tests.conftest import make_profile


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": [], "delete": []}
    )
    last_payload: object | None = None
    last_options: dict[str, object] = field(default_factory=dict)
    last_filters: list[tuple[str, object]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(self, payload, **options) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.last_options = options
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def like(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_load_profile_reads_settings_document() -> None:
    client = FakeSupabaseClient()
    table = client.table("hydration_store")
    table.queue(
        "select",
        [
            {
                "value": {
                    "weight": 70,
                    "weightUnit": "lbs",
                    "activity": "light",
                    "climate": "veryHot",
                    "wakeTime": "07:00",
                    "sleepTime": "22:00",
                    "reminderFrequency": 90,
                    "dailyGoalML": 2940,
                }
            }
        ],
    )

    repository = SupabaseHydrationRepository(client)
    profile = asyncio.run(repository.load_profile())

    assert profile is not None
    assert profile.climate is Climate.VERY_HOT
    assert profile.weight_unit is WeightUnit.LBS
    assert profile.daily_goal_ml == 2940
    assert table.last_filters == [("key", SETTINGS_KEY)]


def test_load_profile_returns_none_when_missing() -> None:
    repository = SupabaseHydrationRepository(FakeSupabaseClient())

    assert asyncio.run(repository.load_profile()) is None


def test_save_daily_state_upserts_by_date_key() -> None:
    client = FakeSupabaseClient()
    table = client.table("custom_store")
    repository = SupabaseHydrationRepository(client, table="custom_store")

    asyncio.run(
        repository.save_daily_state(
            DailyState(
                day=date(2026, 3, 10),
                consumed_ml=500,
                remaining_ml=1940,
                reminders_completed=2,
                scheduled_reminder_ids=("a", "b"),
            )
        )
    )

    assert isinstance(table.last_payload, dict)
    assert table.last_payload["key"] == f"{DAILY_STATE_PREFIX}2026-03-10"
    assert table.last_payload["value"] == {
        "date": "2026-03-10",
        "consumedML": 500,
        "remainingML": 1940,
        "remindersCompleted": 2,
        "remindersSkipped": 0,
        "scheduledReminderIds": ["a", "b"],
    }
    assert table.last_options == {"on_conflict": "key"}


def test_list_daily_state_dates_skips_malformed_keys() -> None:
    client = FakeSupabaseClient()
    table = client.table("hydration_store")
    table.queue(
        "select",
        [
            {"key": f"{DAILY_STATE_PREFIX}2026-03-08"},
            {"key": f"{DAILY_STATE_PREFIX}not-a-date"},
            {"key": f"{DAILY_STATE_PREFIX}2026-03-10"},
        ],
    )

    repository = SupabaseHydrationRepository(client)
    days = asyncio.run(repository.list_daily_state_dates())

    assert days == [date(2026, 3, 10), date(2026, 3, 8)]
    assert table.last_filters == [("key", f"{DAILY_STATE_PREFIX}%")]


def test_delete_daily_state_filters_by_key() -> None:
    client = FakeSupabaseClient()
    table = client.table("hydration_store")

    repository = SupabaseHydrationRepository(client)
    asyncio.run(repository.delete_daily_state(date(2026, 3, 1)))

    assert table.last_filters == [("key", f"{DAILY_STATE_PREFIX}2026-03-01")]


def test_profile_document_roundtrip_keeps_optional_fields() -> None:
    profile = make_profile(age=34, location_name="Porto", weight_unit="lbs")

    assert profile_from_document(profile_to_document(profile)) == profile


def test_daily_state_document_clamps_negative_volumes() -> None:
    state = daily_state_from_document(
        {"date": "2026-03-10", "consumedML": -20, "remainingML": -5}
    )

    assert state.consumed_ml == 0
    assert state.remaining_ml == 0
    assert state.scheduled_reminder_ids == ()
