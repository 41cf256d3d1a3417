"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from h2o_tender.adapters.telegram_reminder_transport import parse_reminder_callback
from h2o_tender.api.routes import router as api_router
from h2o_tender.api.telegram_models import TelegramCallbackQuery, TelegramUpdate
from h2o_tender.app_logging import configure_logging
from h2o_tender.containers import AppContainer
from h2o_tender.domain.reminders import ReminderAction, SkipOutcome
from h2o_tender.domain.units import format_volume
from h2o_tender.services.daily_state import DailyStateService
from h2o_tender.services.errors import (
    PersistenceError,
    ProfileMissingError,
    StateError,
    ValidationError,
)
from h2o_tender.telegram_commands import BotCommand, telegram_commands

_SAVE_FAILED_TEXT = "Couldn't save that right now. Please try again."


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await state_container.telegram_client.set_my_commands(telegram_commands())
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        try:
            await state_container.daily_state_service.load()
        except ProfileMissingError:
            logger.info("No profile saved yet; waiting for onboarding")
        except PersistenceError:
            logger.exception("Failed to load daily state on startup")
        try:
            await state_container.history_service.cleanup(
                state_container.settings.history_days_to_keep
            )
        except PersistenceError:
            logger.exception("Failed to clean up old daily states")
        state_container.rollover_monitor.start()
        yield
        await state_container.rollover_monitor.stop()
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(StateError)
    async def state_error_handler(request: Request, exc: StateError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(
        request: Request, exc: PersistenceError
    ) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    app.include_router(api_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(  # noqa: PLR0911
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        state_container: AppContainer = request.app.state.container
        telegram_client = state_container.telegram_client
        chat_id = update.chat_id()
        if chat_id is not None and chat_id != state_container.settings.telegram_chat_id:
            if update.callback_query:
                await telegram_client.answer_callback_query(
                    update.callback_query.id, text="Not authorized."
                )
                return {"status": "ok"}
            if update.message:
                await telegram_client.send_message(
                    chat_id=chat_id, text="This bot is private."
                )
                return {"status": "ok"}

        if update.callback_query:
            await _handle_callback(state_container, update.callback_query, logger)
            return {"status": "ok"}

        message = update.message
        if not message or not message.text or chat_id is None:
            return {"status": "ok"}

        service = state_container.daily_state_service
        command, _, argument = message.text.strip().partition(" ")
        command = command.split("@", maxsplit=1)[0]
        try:
            if command in {BotCommand.START.slash, BotCommand.TODAY.slash}:
                await service.current()
                text = _format_today(service)
            elif command == BotCommand.SCHEDULE.slash:
                await service.current()
                text = _format_schedule(service)
            elif command == BotCommand.DRINK.slash:
                amount_ml = _parse_amount(argument)
                if amount_ml is None:
                    text = "Usage: /drink 250"
                else:
                    await service.record_consumption(amount_ml)
                    text = f"Logged {amount_ml} ml.\n{_format_today(service)}"
            else:
                text = _help_text()
        except (StateError, ValidationError) as exc:
            text = str(exc)
        except PersistenceError:
            logger.exception("Failed to handle %s", command)
            text = _SAVE_FAILED_TEXT
        await telegram_client.send_message(chat_id=chat_id, text=text)
        return {"status": "ok"}

    return app


async def _handle_callback(
    state_container: AppContainer,
    callback: TelegramCallbackQuery,
    logger: logging.Logger,
) -> None:
    """Apply a reminder button press and report the result."""
    telegram_client = state_container.telegram_client
    parsed = parse_reminder_callback(callback.data) if callback.data else None
    if parsed is None:
        await telegram_client.answer_callback_query(callback.id)
        return

    action, amount_ml = parsed
    service = state_container.daily_state_service
    try:
        if action is ReminderAction.DRINK:
            await service.record_reminder_drink(amount_ml)
            summary = f"Logged {amount_ml} ml.\n{_format_today(service)}"
        else:
            outcome = await service.skip_reminder()
            summary = _format_skip(service, outcome)
    except (StateError, ValidationError) as exc:
        await telegram_client.answer_callback_query(callback.id, text=str(exc))
        return
    except PersistenceError:
        logger.exception("Failed to record reminder %s", action.value)
        await telegram_client.answer_callback_query(
            callback.id, text=_SAVE_FAILED_TEXT
        )
        return

    await telegram_client.answer_callback_query(callback.id)
    if callback.message is None:
        return
    try:
        await telegram_client.clear_reply_markup(
            callback.message.chat.id, callback.message.message_id
        )
    except Exception:
        logger.exception("Failed to clear reminder buttons")
    await telegram_client.send_message(chat_id=callback.message.chat.id, text=summary)


def _parse_amount(raw: str) -> int | None:
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _format_today(service: DailyStateService) -> str:
    """Format today's progress for Telegram."""
    profile = service.profile
    state = service.state
    unit = profile.weight_unit
    lines = [
        f"Today: {format_volume(state.consumed_ml, unit)} of "
        f"{format_volume(profile.daily_goal_ml, unit)} ({service.progress()}%)",
        f"Remaining: {format_volume(state.remaining_ml, unit)}",
        f"Reminders: {state.reminders_completed} done, "
        f"{state.reminders_skipped} skipped",
    ]
    next_slot = service.next_reminder()
    if next_slot:
        lines.append(
            f"Next reminder: {next_slot.time} "
            f"({format_volume(next_slot.amount_ml, unit)})"
        )
    if not service.reminders_in_sync:
        lines.append("Reminders could not be scheduled; they will retry shortly.")
    return "\n".join(lines)


def _format_schedule(service: DailyStateService) -> str:
    """Format the reminders still ahead today."""
    upcoming = service.upcoming_reminders()
    if not upcoming:
        return "No more reminders today."
    unit = service.profile.weight_unit
    lines = ["Upcoming reminders:"]
    for slot in upcoming:
        lines.append(f"- {slot.time}: {format_volume(slot.amount_ml, unit)}")
    return "\n".join(lines)


def _format_skip(service: DailyStateService, outcome: SkipOutcome) -> str:
    """Format the redistribution that follows a skipped reminder."""
    unit = service.profile.weight_unit
    if outcome.reminders_left == 0 or outcome.amount_per_reminder_ml == 0:
        lines = ["Reminder skipped. No reminders left today."]
    else:
        lines = [
            "Reminder skipped. "
            f"{outcome.reminders_left} reminders left at "
            f"{format_volume(outcome.amount_per_reminder_ml, unit)} each."
        ]
    if not outcome.reminders_synced:
        lines.append("Reminders could not be rescheduled.")
    lines.append(_format_today(service))
    return "\n".join(lines)


def _help_text() -> str:
    lines = ["Commands:"]
    for entry in BotCommand:
        lines.append(f"{entry.slash} - {entry.value.description}")
    return "\n".join(lines)
