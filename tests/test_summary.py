from __future__ import annotations

import unittest
from datetime import timedelta

from companion.db.models import TurnKind
from companion.services.summary import extract_keywords, rank_themes, summarize
from tests.support import NOW, StoreTestCase


class SummarizerTests(StoreTestCase):
    async def _add(self, texts: list[str], *, kind=TurnKind.USER_MESSAGE, days_ago: int = 0) -> None:
        start = NOW - timedelta(days=days_ago, minutes=len(texts))
        for i, text in enumerate(texts):
            await self.store.append_turn(1, text, kind, created_at=start + timedelta(minutes=i))

    async def test_too_few_messages_gives_empty_string(self):
        await self._add(["work is hard", "work again"])
        self.assertEqual(await summarize(self.store, 1, 7, now=NOW), "")

    async def test_unknown_user_gives_empty_string(self):
        self.assertEqual(await summarize(self.store, 12345, 7, now=NOW), "")

    async def test_recurring_keywords_become_themes(self):
        await self._add([
            "work stress is killing me",
            "my sleep is bad because of work",
            "sleep was terrible",
            "work deadline tomorrow",
        ])
        summary = await summarize(self.store, 1, 7, now=NOW)
        self.assertEqual(summary, "work (3 messages), sleep (2 messages)")

    async def test_same_history_gives_identical_summary(self):
        await self._add([
            "family dinner went badly",
            "family always argues",
            "dinner plans with friends",
            "friends cancelled on me",
        ])
        first = await summarize(self.store, 1, 7, now=NOW)
        second = await summarize(self.store, 1, 7, now=NOW)
        self.assertNotEqual(first, "")
        self.assertEqual(first, second)

    async def test_turns_outside_window_are_ignored(self):
        await self._add(["exams exams", "exams soon", "exams tomorrow"], days_ago=10)
        await self._add(["music helps", "music again", "nothing new"])
        summary = await summarize(self.store, 1, 7, now=NOW)
        self.assertIn("music", summary)
        self.assertNotIn("exams", summary)

    async def test_only_user_messages_feed_themes(self):
        await self._add(["breathing exercise", "try breathing", "breathing slowly"], kind=TurnKind.AI_RESPONSE)
        await self._add(["hello there", "school today", "school again"])
        summary = await summarize(self.store, 1, 7, now=NOW)
        self.assertNotIn("breathing", summary)
        self.assertIn("school", summary)

    async def test_no_recurring_keyword_gives_empty_string(self):
        await self._add(["apples", "bananas", "cherries"])
        self.assertEqual(await summarize(self.store, 1, 7, now=NOW), "")


class RankThemesTests(unittest.TestCase):
    def test_recent_reinforcement_outranks_older_themes(self):
        themes = rank_themes(["alpha", "alpha", "gamma", "gamma"])
        self.assertEqual(themes, [("gamma", 2), ("alpha", 2)])

    def test_theme_count_is_capped(self):
        messages = ["alpha bravo delta gamma", "alpha bravo delta gamma"]
        self.assertEqual(len(rank_themes(messages, max_themes=3)), 3)

    def test_keyword_counts_once_per_message(self):
        self.assertEqual(rank_themes(["panic panic panic", "calm"]), [])

    def test_ties_break_alphabetically(self):
        themes = rank_themes(["zebra apple", "zebra apple"])
        self.assertEqual(themes, [("apple", 2), ("zebra", 2)])

    def test_extract_keywords_skips_short_and_stop_words(self):
        self.assertEqual(extract_keywords("I don't think my job is OK, honestly"), {"honestly"})


if __name__ == "__main__":
    unittest.main()
