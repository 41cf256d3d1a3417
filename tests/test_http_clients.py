"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from h2o_tender.adapters.telegram_client import HttpxTelegramClient


def test_telegram_client_send_and_callback() -> None:
    seen: list[tuple[str, dict[str, object]]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, json.loads(request.content.decode())))
        return httpx.Response(200, json={"ok": True, "result": {}})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    asyncio.run(
        client.send_message(
            chat_id=1, text="Hi", reply_markup={"inline_keyboard": []}
        )
    )
    asyncio.run(client.answer_callback_query(callback_query_id="cbq-1"))
    asyncio.run(client.clear_reply_markup(chat_id=1, message_id=7))

    assert [path for path, _ in seen] == [
        "/bottoken/sendMessage",
        "/bottoken/answerCallbackQuery",
        "/bottoken/editMessageReplyMarkup",
    ]
    assert seen[0][1] == {
        "chat_id": 1,
        "text": "Hi",
        "reply_markup": {"inline_keyboard": []},
    }
    assert seen[1][1] == {"callback_query_id": "cbq-1"}
    assert seen[2][1] == {"chat_id": 1, "message_id": 7}


def test_telegram_client_sets_commands() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/setMyCommands")
        payload = json.loads(request.content.decode())
        assert payload["commands"][0]["command"] == "today"
        return httpx.Response(200, json={"ok": True, "result": True})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    asyncio.run(
        client.set_my_commands([{"command": "today", "description": "Progress"}])
    )


def test_telegram_client_raises_on_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"ok": False})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxTelegramClient(bot_token="token", http_client=async_client)

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.send_message(chat_id=1, text="Hi"))
