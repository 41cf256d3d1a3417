"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

import pytest

from h2o_tender.adapters.telegram_client import TelegramClient
from h2o_tender.config import Settings
from h2o_tender.containers import AppContainer
from h2o_tender.domain.daily_state import DailyState
from h2o_tender.domain.profile import Profile
from h2o_tender.domain.reminders import ReminderSlot
from h2o_tender.services.daily_state import (
    DailyStateService,
    HydrationRepository,
    ReminderTransport,
)
from h2o_tender.services.history import HistoryService
from h2o_tender.services.profiles import create_profile
from h2o_tender.services.rollover import RolloverMonitor

TODAY = date(2026, 3, 10)


@dataclass
class FixedClock:
    """Clock returning a settable time."""

    now: datetime = field(default_factory=lambda: datetime(2026, 3, 10, 6, 30))

    def __call__(self) -> datetime:
        return self.now

    def set(self, hour: int, minute: int = 0) -> None:
        self.now = self.now.replace(hour=hour, minute=minute)

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@dataclass
class InMemoryHydrationRepository(HydrationRepository):
    """In-memory hydration repository for tests."""

    profile: Profile | None = None
    states: dict[date, DailyState] = field(default_factory=dict)
    fail_reads: bool = False
    fail_writes: bool = False
    profile_saves: int = 0

    async def load_profile(self) -> Profile | None:
        self._check_read()
        return self.profile

    async def save_profile(self, profile: Profile) -> None:
        self._check_write()
        self.profile = profile
        self.profile_saves += 1

    async def load_daily_state(self, day: date) -> DailyState | None:
        self._check_read()
        return self.states.get(day)

    async def save_daily_state(self, state: DailyState) -> None:
        self._check_write()
        self.states[state.day] = state

    async def list_daily_state_dates(self) -> list[date]:
        self._check_read()
        return sorted(self.states, reverse=True)

    async def delete_daily_state(self, day: date) -> None:
        self._check_write()
        self.states.pop(day, None)

    def _check_read(self) -> None:
        if self.fail_reads:
            raise ConnectionError("storage unavailable")

    def _check_write(self) -> None:
        if self.fail_writes:
            raise ConnectionError("storage unavailable")


@dataclass
class FakeReminderTransport(ReminderTransport):
    """Fake reminder transport that records what was scheduled."""

    scheduled: list[list[ReminderSlot]] = field(default_factory=list)
    cancel_count: int = 0
    fail_schedule: bool = False
    fail_cancel: bool = False
    _next_id: int = 0

    @property
    def last_scheduled(self) -> list[ReminderSlot]:
        return self.scheduled[-1] if self.scheduled else []

    async def schedule_all(self, reminders: list[ReminderSlot]) -> list[str]:
        if self.fail_schedule:
            raise RuntimeError("scheduler unavailable")
        self.scheduled.append(list(reminders))
        ids = []
        for _ in reminders:
            self._next_id += 1
            ids.append(f"reminder-{self._next_id}")
        return ids

    async def cancel_all(self) -> None:
        if self.fail_cancel:
            raise RuntimeError("scheduler unavailable")
        self.cancel_count += 1


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records messages."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    markups: list[dict | None] = field(default_factory=list)
    callbacks: list[tuple[str, str | None]] = field(default_factory=list)
    cleared: list[tuple[int, int]] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None

    async def send_message(
        self, chat_id: int, text: str, reply_markup: dict | None = None
    ) -> None:
        self.messages.append((chat_id, text))
        self.markups.append(reply_markup)

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        self.callbacks.append((callback_query_id, text))

    async def clear_reply_markup(self, chat_id: int, message_id: int) -> None:
        self.cleared.append((chat_id, message_id))

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands


def make_profile(**overrides: object) -> Profile:
    """Build a valid profile; the defaults give a 2440 ml goal and 15 reminders."""
    values: dict[str, object] = {
        "weight_kg": 70,
        "activity": "light",
        "climate": "mild",
        "wake_time": "07:00",
        "sleep_time": "22:00",
        "reminder_frequency": 60,
    }
    values.update(overrides)
    return create_profile(**values)  # type: ignore[arg-type]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        telegram_chat_id=99,
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def repository() -> InMemoryHydrationRepository:
    return InMemoryHydrationRepository()


@pytest.fixture
def transport() -> FakeReminderTransport:
    return FakeReminderTransport()


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def daily_state_service(
    repository: InMemoryHydrationRepository,
    transport: FakeReminderTransport,
    clock: FixedClock,
) -> DailyStateService:
    return DailyStateService(repository=repository, transport=transport, clock=clock)


@pytest.fixture
def container(
    settings: Settings,
    repository: InMemoryHydrationRepository,
    telegram_client: FakeTelegramClient,
    daily_state_service: DailyStateService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        daily_state_service=daily_state_service,
        history_service=HistoryService(repository),
        rollover_monitor=RolloverMonitor(
            daily_state_service, poll_interval_seconds=3600
        ),
        close_resources=close_resources,
    )
