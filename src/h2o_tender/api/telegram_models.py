"""Pydantic models for Telegram webhook payloads."""

from pydantic import BaseModel, Field


class TelegramUser(BaseModel):
    """Telegram user payload."""

    id: int
    is_bot: bool | None = None
    first_name: str | None = None
    username: str | None = None


class TelegramChat(BaseModel):
    """Telegram chat payload."""

    id: int
    type: str


class TelegramMessage(BaseModel):
    """Telegram message payload."""

    message_id: int
    date: int
    chat: TelegramChat
    from_user: TelegramUser | None = Field(default=None, alias="from")
    text: str | None = None


class TelegramCallbackQuery(BaseModel):
    """Telegram callback query payload (an inline button press)."""

    id: str
    from_user: TelegramUser = Field(alias="from")
    message: TelegramMessage | None = None
    data: str | None = None


class TelegramUpdate(BaseModel):
    """Telegram update payload."""

    update_id: int
    message: TelegramMessage | None = None
    callback_query: TelegramCallbackQuery | None = None

    def chat_id(self) -> int | None:
        """Return the chat the update came from, if known."""
        if self.callback_query is not None:
            if self.callback_query.message is not None:
                return self.callback_query.message.chat.id
            return self.callback_query.from_user.id
        if self.message is not None:
            return self.message.chat.id
        return None
