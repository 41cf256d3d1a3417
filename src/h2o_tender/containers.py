"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from h2o_tender.adapters.supabase_hydration_repository import (
    SupabaseHydrationRepository,
)
from h2o_tender.adapters.telegram_client import HttpxTelegramClient, TelegramClient
from h2o_tender.adapters.telegram_reminder_transport import TelegramReminderTransport
from h2o_tender.config import Settings
from h2o_tender.domain.clock import local_clock
from h2o_tender.services.daily_state import DailyStateService
from h2o_tender.services.history import HistoryService
from h2o_tender.services.rollover import RolloverMonitor


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    daily_state_service: DailyStateService
    history_service: HistoryService
    rollover_monitor: RolloverMonitor
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    repository = SupabaseHydrationRepository(
        supabase_client, table=resolved_settings.supabase_table
    )
    clock = local_clock(resolved_settings.timezone)
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    transport = TelegramReminderTransport(
        telegram_client=telegram_client,
        chat_id=resolved_settings.telegram_chat_id,
        clock=clock,
    )
    daily_state_service = DailyStateService(
        repository=repository,
        transport=transport,
        clock=clock,
    )
    rollover_monitor = RolloverMonitor(
        daily_state_service,
        poll_interval_seconds=resolved_settings.rollover_poll_seconds,
        align_to_midnight=resolved_settings.rollover_align_to_midnight,
    )

    async def close_resources() -> None:
        await transport.cancel_all()
        await telegram_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        daily_state_service=daily_state_service,
        history_service=HistoryService(repository),
        rollover_monitor=rollover_monitor,
        close_resources=close_resources,
    )
