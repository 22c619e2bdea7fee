import logging
from dataclasses import dataclass

from companion.db.store import Store
from companion.services import history
from companion.utils.constants import MAX_CONTEXT_ITEMS, MAX_CONTEXT_TURNS, SUMMARY_DAYS
from companion.utils.prompts import THEMES_NOTE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContextRequest:
    user_id: int
    channel_id: int | None = None
    max_turns: int = MAX_CONTEXT_TURNS
    max_context_items: int = MAX_CONTEXT_ITEMS


async def build_context(
    store: Store,
    user_id: int | str,
    channel_id: int | None,
    max_turns: int,
    max_context_items: int,
) -> list[dict]:
    """Build the conversational memory sent with one AI request.

    ``max_turns`` bounds how far back to look, ``max_context_items`` bounds
    how much is sent. When the lookback holds more than the send cap, the
    oldest turns are dropped. ``channel_id`` only tags the request in logs.
    """
    if max_turns < 0 or max_context_items < 0:
        raise ValueError("context caps must not be negative")

    turns = await history.recent(store, user_id, max_turns)
    if len(turns) > max_context_items:
        turns = turns[len(turns) - max_context_items:]

    logger.debug(
        "Context for user %s (channel %s): %d turns",
        user_id, channel_id, len(turns),
    )
    return [{"role": t.kind.role, "content": t.content} for t in turns]


async def build_context_for(store: Store, request: ContextRequest) -> list[dict]:
    return await build_context(
        store,
        request.user_id,
        request.channel_id,
        request.max_turns,
        request.max_context_items,
    )


def build_messages(
    system_prompt: str,
    context: list[dict],
    *,
    summary: str = "",
    summary_days: int = SUMMARY_DAYS,
) -> list[dict]:
    """Assemble the messages list for the LLM: system prompt, themes, history."""
    result = [{"role": "system", "content": system_prompt}]
    if summary:
        result.append({
            "role": "system",
            "content": THEMES_NOTE.format(days=summary_days, summary=summary),
        })
    result.extend(context)
    return result
