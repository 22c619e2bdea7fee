"""Append-only log of conversation turns per user."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from companion.db.models import ConversationTurn, TurnKind, utcnow
from companion.db.store import Store

logger = logging.getLogger(__name__)


async def append(
    store: Store,
    user_id: int | str,
    content: str,
    kind: TurnKind,
    *,
    channel_id: int | None = None,
) -> ConversationTurn:
    # No dedup: callers must not append the same message twice.
    return await store.append_turn(user_id, content, kind, channel_id=channel_id)


async def recent(store: Store, user_id: int | str, limit: int) -> list[ConversationTurn]:
    """Up to ``limit`` newest turns, returned oldest-to-newest."""
    if limit < 0:
        raise ValueError("limit must not be negative")
    return await store.query_turns(user_id, limit=limit)


async def clear(store: Store, user_id: int | str) -> int:
    deleted = await store.delete_turns(user_id)
    logger.info("Cleared %d turns for user %s", deleted, user_id)
    return deleted


async def stats(store: Store, user_id: int | str) -> dict[TurnKind, int]:
    return await store.count_turns(user_id)


async def prune(
    store: Store,
    days_to_keep: int,
    *,
    now: datetime | None = None,
) -> int:
    cutoff = (now or utcnow()) - timedelta(days=days_to_keep)
    deleted = await store.prune_turns(cutoff)
    if deleted:
        logger.info("Pruned %d turns older than %d days", deleted, days_to_keep)
    return deleted
