"""Short digest of recurring themes from a user's recent messages.

Themes are keywords that show up in at least two different user messages
inside the window. Each keyword scores the sum of the 1-based positions of
the messages mentioning it, so themes reinforced recently outrank ones that
faded. The output depends only on the turns in the window.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta

from companion.db.models import TurnKind, utcnow
from companion.db.store import Store
from companion.utils.constants import SUMMARY_DAYS, SUMMARY_MAX_THEMES, SUMMARY_MIN_TURNS

_WORD_RE = re.compile(r"[^\W\d_]+(?:'[^\W\d_]+)*")
_MIN_WORD_LEN = 4
_MIN_MENTIONS = 2

STOPWORDS = frozenset("""
    about above after again against also always among another anyone anything
    around because been before being below between both came cannot come could
    doing done down during each else even every ever feel feeling felt from
    going gone have having here hers herself himself into just keep kind know
    like little look made make many maybe more most much must myself never
    next often only other ours over really right said same saying seem should
    since some something sometimes still such sure take than that their them
    then there these they thing things think this those though through today
    together tomorrow too under until very want wanted was well were what
    when where which while will with without would yeah year your yours
    yesterday okay thanks thank please hello
""".split())


def extract_keywords(text: str) -> set[str]:
    words = _WORD_RE.findall(text.lower().replace("’", "'"))
    return {
        w for w in words
        if len(w) >= _MIN_WORD_LEN and "'" not in w and w not in STOPWORDS
    }


def rank_themes(messages: list[str], max_themes: int = SUMMARY_MAX_THEMES) -> list[tuple[str, int]]:
    """Return ``(keyword, message_count)`` pairs for the strongest themes.

    ``messages`` must be ordered oldest-to-newest.
    """
    scores: dict[str, int] = {}
    mentions: dict[str, int] = {}
    for position, text in enumerate(messages, start=1):
        for word in extract_keywords(text):
            scores[word] = scores.get(word, 0) + position
            mentions[word] = mentions.get(word, 0) + 1

    recurring = [w for w, n in mentions.items() if n >= _MIN_MENTIONS]
    recurring.sort(key=lambda w: (-scores[w], -mentions[w], w))
    return [(w, mentions[w]) for w in recurring[:max_themes]]


async def summarize(
    store: Store,
    user_id: int | str,
    days: int = SUMMARY_DAYS,
    *,
    now: datetime | None = None,
) -> str:
    now = now or utcnow()
    turns = await store.query_turns(user_id, since=now - timedelta(days=days), until=now)
    messages = [t.content for t in turns if t.kind is TurnKind.USER_MESSAGE]
    if len(messages) < SUMMARY_MIN_TURNS:
        return ""

    themes = rank_themes(messages)
    return ", ".join(f"{word} ({count} messages)" for word, count in themes)
