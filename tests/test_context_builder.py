from __future__ import annotations

import unittest

from companion.db.models import TurnKind
from companion.services import history
from companion.services.context import (
    ContextRequest,
    build_context,
    build_context_for,
    build_messages,
)
from tests.support import StoreTestCase


class ContextBuilderTests(StoreTestCase):
    async def _append_numbered(self, user_id: int, n: int) -> None:
        for i in range(n):
            await history.append(self.store, user_id, f"m{i}", TurnKind.USER_MESSAGE)

    async def test_returns_everything_when_under_both_caps(self):
        await self._append_numbered(1, 5)
        context = await build_context(self.store, 1, None, 100, 20)
        self.assertEqual([m["content"] for m in context], [f"m{i}" for i in range(5)])

    async def test_send_cap_drops_oldest_turns(self):
        await self._append_numbered(1, 30)
        context = await build_context(self.store, 1, 10, 100, 20)
        self.assertEqual(len(context), 20)
        self.assertEqual([m["content"] for m in context], [f"m{i}" for i in range(10, 30)])

    async def test_lookback_cap_applies_first(self):
        await self._append_numbered(1, 30)
        context = await build_context(self.store, 1, None, 8, 20)
        self.assertEqual([m["content"] for m in context], [f"m{i}" for i in range(22, 30)])

    async def test_kinds_map_to_roles(self):
        await history.append(self.store, 1, "hi", TurnKind.USER_MESSAGE)
        await history.append(self.store, 1, "hello!", TurnKind.AI_RESPONSE)
        await history.append(self.store, 1, "someone else spoke", TurnKind.CHANNEL_CONTEXT)
        context = await build_context(self.store, 1, None, 10, 10)
        self.assertEqual(
            context,
            [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "hello!"},
                {"role": "system", "content": "someone else spoke"},
            ],
        )

    async def test_empty_history_gives_empty_context(self):
        self.assertEqual(await build_context(self.store, 404, None, 100, 20), [])

    async def test_zero_send_cap_gives_empty_context(self):
        await self._append_numbered(1, 3)
        self.assertEqual(await build_context(self.store, 1, None, 100, 0), [])

    async def test_building_does_not_touch_the_store(self):
        await self._append_numbered(1, 25)
        await build_context(self.store, 1, None, 100, 5)
        self.assertEqual(len(await history.recent(self.store, 1, 100)), 25)

    async def test_negative_caps_are_rejected(self):
        with self.assertRaises(ValueError):
            await build_context(self.store, 1, None, -1, 20)
        with self.assertRaises(ValueError):
            await build_context(self.store, 1, None, 10, -5)

    async def test_context_request_uses_its_caps(self):
        await self._append_numbered(1, 6)
        request = ContextRequest(user_id=1, channel_id=77, max_turns=5, max_context_items=2)
        context = await build_context_for(self.store, request)
        self.assertEqual([m["content"] for m in context], ["m4", "m5"])


class BuildMessagesTests(unittest.TestCase):
    def test_system_prompt_then_context(self):
        context = [{"role": "user", "content": "hey"}]
        messages = build_messages("be kind", context)
        self.assertEqual(messages, [{"role": "system", "content": "be kind"}] + context)

    def test_summary_becomes_second_system_message(self):
        context = [{"role": "user", "content": "hey"}]
        messages = build_messages("be kind", context, summary="work (3 messages)", summary_days=7)
        self.assertEqual(len(messages), 3)
        self.assertEqual(messages[1]["role"], "system")
        self.assertIn("work (3 messages)", messages[1]["content"])
        self.assertIn("7 days", messages[1]["content"])
        self.assertEqual(messages[2], context[0])


if __name__ == "__main__":
    unittest.main()
