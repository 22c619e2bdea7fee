from __future__ import annotations

import asyncio
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from aiogram.exceptions import TelegramNetworkError
from aiogram.methods import SendChatAction

from companion.config import Settings
from companion.db.models import TurnKind
from companion.errors import ServiceError
from companion.handlers.chat import handle_text
from companion.services import history
from companion.utils.prompts import AI_FALLBACK
from tests.support import StoreTestCase

_SETTINGS = Settings(telegram_bot_token="t", openrouter_api_key="k", max_context_items=4)


class _FakeLLM:
    def __init__(self, reply: str | None = None, delay: float = 0) -> None:
        self.reply = reply
        self.delay = delay
        self.calls: list[list[dict]] = []

    async def chat_completion(self, messages: list[dict]) -> str:
        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.reply is None:
            raise ServiceError("AI service timed out")
        return self.reply


def _message(text: str, *, chat_type: str = "private", chat_id: int = 10, reply_to=None):
    bot = SimpleNamespace(
        send_chat_action=AsyncMock(),
        me=AsyncMock(return_value=SimpleNamespace(id=99, username="companion_bot")),
    )
    return SimpleNamespace(
        text=text,
        from_user=SimpleNamespace(id=1, username="sam", first_name="Sam", language_code="en"),
        chat=SimpleNamespace(id=chat_id, type=chat_type),
        reply_to_message=reply_to,
        bot=bot,
        answer=AsyncMock(),
    )


class ChatHandlerTests(StoreTestCase):
    async def test_private_message_gets_ai_reply_and_is_logged(self):
        llm = _FakeLLM("That sounds hard. Want to tell me more?")
        message = _message("I had a rough day")

        await handle_text(message, self.store, _SETTINGS, llm)

        turns = await history.recent(self.store, 1, 10)
        self.assertEqual([t.kind for t in turns], [TurnKind.USER_MESSAGE, TurnKind.AI_RESPONSE])
        self.assertEqual(turns[0].channel_id, 10)
        sent = llm.calls[0]
        self.assertEqual(sent[0]["role"], "system")
        self.assertEqual(sent[-1], {"role": "user", "content": "I had a rough day"})
        message.answer.assert_awaited()

    async def test_context_sent_to_ai_is_capped(self):
        for i in range(10):
            await history.append(self.store, 1, f"old {i}", TurnKind.USER_MESSAGE)
        llm = _FakeLLM("ok")

        await handle_text(_message("newest"), self.store, _SETTINGS, llm)

        history_part = [m for m in llm.calls[0] if m["role"] != "system"]
        self.assertEqual(len(history_part), 4)
        self.assertEqual(history_part[-1]["content"], "newest")

    async def test_service_error_sends_fallback_and_keeps_only_user_turn(self):
        message = _message("hello?")

        await handle_text(message, self.store, _SETTINGS, _FakeLLM(None))

        message.answer.assert_awaited_once_with(AI_FALLBACK)
        turns = await history.recent(self.store, 1, 10)
        self.assertEqual([t.kind for t in turns], [TurnKind.USER_MESSAGE])

    async def test_unaddressed_group_message_is_ambient_context(self):
        llm = _FakeLLM("should not be used")
        message = _message("anyone seen the game?", chat_type="group", chat_id=-500)

        await handle_text(message, self.store, _SETTINGS, llm)

        self.assertEqual(llm.calls, [])
        message.answer.assert_not_awaited()
        turns = await history.recent(self.store, 1, 10)
        self.assertEqual(len(turns), 1)
        self.assertEqual(turns[0].kind, TurnKind.CHANNEL_CONTEXT)
        self.assertEqual(turns[0].channel_id, -500)

    async def test_group_mention_is_answered(self):
        llm = _FakeLLM("Hi there!")
        message = _message("@Companion_Bot are you around?", chat_type="group", chat_id=-500)

        await handle_text(message, self.store, _SETTINGS, llm)

        self.assertEqual(len(llm.calls), 1)
        message.answer.assert_awaited()

    async def test_typing_failure_does_not_lose_the_reply(self):
        message = _message("are you there?")
        message.bot.send_chat_action.side_effect = TelegramNetworkError(
            method=SendChatAction(chat_id=10, action="typing"), message="net down"
        )

        await handle_text(message, self.store, _SETTINGS, _FakeLLM("I am here.", delay=0.05))

        message.answer.assert_awaited()
        self.assertIn("I am here.", message.answer.await_args.args[0])
        turns = await history.recent(self.store, 1, 10)
        self.assertEqual([t.kind for t in turns], [TurnKind.USER_MESSAGE, TurnKind.AI_RESPONSE])


if __name__ == "__main__":
    unittest.main()
