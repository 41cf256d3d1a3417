"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    START = TelegramCommand("start", "Show today's hydration status")
    TODAY = TelegramCommand("today", "Progress toward today's goal")
    SCHEDULE = TelegramCommand("schedule", "Remaining reminders for today")
    DRINK = TelegramCommand("drink", "Log a drink, e.g. /drink 250")

    @property
    def slash(self) -> str:
        """Command as typed in chat, e.g. ``/today``."""
        return f"/{self.value.command}"


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for the Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]
