"""Reminder transport that delivers reminders as Telegram messages.

Each scheduled reminder is an asyncio task sleeping until the next
occurrence of its time of day. The message carries "Drink now" and "Skip"
buttons whose callback data comes back through the Telegram webhook.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from h2o_tender.adapters.telegram_client import TelegramClient
from h2o_tender.domain.clock import next_occurrence
from h2o_tender.domain.reminders import ReminderAction, ReminderSlot
from h2o_tender.services.daily_state import ReminderTransport

_logger = logging.getLogger(__name__)

CALLBACK_PREFIX = "reminder"


@dataclass
class TelegramReminderTransport(ReminderTransport):
    """Schedules reminders in-process and sends them to one Telegram chat."""

    telegram_client: TelegramClient
    chat_id: int
    clock: Callable[[], datetime]
    _tasks: dict[str, "asyncio.Task[None]"] = field(
        default_factory=dict, init=False, repr=False
    )

    @property
    def pending_ids(self) -> list[str]:
        """Ids of reminders that have not been delivered yet."""
        return list(self._tasks)

    async def schedule_all(self, reminders: list[ReminderSlot]) -> list[str]:
        """Start one timer per reminder and return their ids."""
        now = self.clock()
        reminder_ids = []
        for reminder in reminders:
            reminder_id = str(uuid4())
            delay = (next_occurrence(reminder.time, now) - now).total_seconds()
            self._tasks[reminder_id] = asyncio.create_task(
                self._deliver_later(reminder_id, reminder, delay),
                name=f"h2o-tender-reminder-{reminder.time}",
            )
            reminder_ids.append(reminder_id)
        _logger.info("Scheduled %s reminders", len(reminder_ids))
        return reminder_ids

    async def cancel_all(self) -> None:
        """Cancel every pending timer."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            _logger.info("Cancelled %s pending reminders", len(tasks))

    async def deliver(self, reminder: ReminderSlot) -> None:
        """Send a reminder message immediately."""
        await self.telegram_client.send_message(
            chat_id=self.chat_id,
            text=reminder_text(reminder),
            reply_markup=reminder_keyboard(reminder),
        )

    async def _deliver_later(
        self, reminder_id: str, reminder: ReminderSlot, delay_seconds: float
    ) -> None:
        try:
            await asyncio.sleep(delay_seconds)
            await self.deliver(reminder)
        except Exception:
            _logger.exception("Failed to deliver reminder at %s", reminder.time)
        finally:
            self._tasks.pop(reminder_id, None)


def reminder_text(reminder: ReminderSlot) -> str:
    """Return the reminder message body."""
    return f"Hydration reminder ({reminder.time}): drink ~{reminder.amount_ml} ml now."


def reminder_keyboard(reminder: ReminderSlot) -> dict[str, object]:
    """Return the inline keyboard with the reminder actions."""
    return {
        "inline_keyboard": [
            [
                {
                    "text": "Drink now",
                    "callback_data": reminder_callback_data(
                        ReminderAction.DRINK, reminder.amount_ml
                    ),
                },
                {
                    "text": "Skip",
                    "callback_data": reminder_callback_data(ReminderAction.SKIP),
                },
            ]
        ]
    }


def reminder_callback_data(action: ReminderAction, amount_ml: int = 0) -> str:
    """Encode a reminder action as Telegram callback data."""
    return f"{CALLBACK_PREFIX}:{action.value}:{amount_ml}"


def parse_reminder_callback(data: str) -> tuple[ReminderAction, int] | None:
    """Decode reminder callback data; return None for other callbacks."""
    parts = data.split(":")
    if len(parts) != 3 or parts[0] != CALLBACK_PREFIX:  # noqa: PLR2004
        return None
    try:
        action = ReminderAction(parts[1])
        amount_ml = int(parts[2])
    except ValueError:
        return None
    if amount_ml < 0:
        return None
    return action, amount_ml
