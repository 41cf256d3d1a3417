"""Telegram Bot API client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx

_API_BASE_URL = "https://api.telegram.org"


class TelegramClient(Protocol):
    """Interface for the Telegram calls the bot makes."""

    async def send_message(
        self, chat_id: int, text: str, reply_markup: dict | None = None
    ) -> None:
        """Send a text message to a chat."""

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        """Acknowledge an inline button press."""

    async def clear_reply_markup(self, chat_id: int, message_id: int) -> None:
        """Remove the inline buttons from a sent message."""

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Publish the bot command list."""


@dataclass
class HttpxTelegramClient:
    """Telegram client implemented with httpx."""

    bot_token: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramClient":
        """Create a Telegram client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    async def send_message(
        self, chat_id: int, text: str, reply_markup: dict | None = None
    ) -> None:
        """Send a message with Telegram's sendMessage method."""
        payload: dict[str, object] = {"chat_id": chat_id, "text": text}
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        await self._call("sendMessage", payload)

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        """Answer a callback query with Telegram's answerCallbackQuery method."""
        payload: dict[str, object] = {"callback_query_id": callback_query_id}
        if text is not None:
            payload["text"] = text
        await self._call("answerCallbackQuery", payload)

    async def clear_reply_markup(self, chat_id: int, message_id: int) -> None:
        """Drop inline buttons with Telegram's editMessageReplyMarkup method."""
        await self._call(
            "editMessageReplyMarkup",
            {"chat_id": chat_id, "message_id": message_id},
        )

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""
        await self._call("setMyCommands", {"commands": commands})

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _call(self, method: str, payload: dict[str, object]) -> None:
        url = f"{_API_BASE_URL}/bot{self.bot_token}/{method}"
        response = await self.http_client.post(
            url, json=payload, timeout=self.timeout_seconds
        )
        response.raise_for_status()
