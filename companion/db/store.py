"""Store facade handed to every service call.

Wraps one aiosqlite connection and the repository functions. Rows come back
as model dataclasses and every ``aiosqlite.Error`` surfaces as
``StorageError``. Nothing here retries.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

import aiosqlite

from companion.db.models import (
    ConversationTurn,
    MoodCheckIn,
    TurnKind,
    format_timestamp,
    normalize_user_id,
    parse_timestamp,
    utcnow,
)
from companion.db.repositories import conversation, mood as mood_repo, user
from companion.errors import StorageError
from companion.utils.constants import DEFAULT_INTENSITY

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _storage_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except aiosqlite.Error as e:
        logger.warning("Storage operation %s failed: %s", operation, e)
        raise StorageError(f"{operation} failed: {e}") from e


def _ts(dt: datetime | None) -> str | None:
    return format_timestamp(dt) if dt is not None else None


def _turn(row: dict) -> ConversationTurn:
    return ConversationTurn(
        id=row["id"],
        user_id=row["user_id"],
        kind=TurnKind(row["kind"]),
        content=row["content"],
        created_at=parse_timestamp(row["created_at"]),
        channel_id=row["channel_id"],
        tokens_est=row["tokens_est"],
    )


def _checkin(row: dict) -> MoodCheckIn:
    return MoodCheckIn(
        id=row["id"],
        user_id=row["user_id"],
        mood=row["mood"],
        intensity=row["intensity"],
        created_at=parse_timestamp(row["created_at"]),
        activity=row["activity"],
        note=row["note"],
    )


class Store:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self.db = db

    async def upsert_user(
        self,
        user_id: int | str,
        username: str | None = None,
        first_name: str | None = None,
        language_code: str | None = None,
    ) -> dict:
        async with _storage_errors("upsert_user"):
            return await user.get_or_create_user(
                self.db,
                normalize_user_id(user_id),
                username=username,
                first_name=first_name,
                language_code=language_code,
            )

    async def append_turn(
        self,
        user_id: int | str,
        content: str,
        kind: TurnKind,
        *,
        channel_id: int | None = None,
        created_at: datetime | None = None,
    ) -> ConversationTurn:
        kind = TurnKind(kind)
        async with _storage_errors("append_turn"):
            row = await conversation.add_turn(
                self.db,
                normalize_user_id(user_id),
                kind.value,
                content,
                format_timestamp(created_at or utcnow()),
                channel_id=channel_id,
            )
        return _turn(row)

    async def query_turns(
        self,
        user_id: int | str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> list[ConversationTurn]:
        async with _storage_errors("query_turns"):
            rows = await conversation.get_turns(
                self.db,
                normalize_user_id(user_id),
                since=_ts(since),
                until=_ts(until),
                limit=limit,
            )
        return [_turn(r) for r in rows]

    async def count_turns(self, user_id: int | str) -> dict[TurnKind, int]:
        async with _storage_errors("count_turns"):
            counts = await conversation.count_turns(self.db, normalize_user_id(user_id))
        return {kind: counts.get(kind.value, 0) for kind in TurnKind}

    async def delete_turns(self, user_id: int | str) -> int:
        async with _storage_errors("delete_turns"):
            return await conversation.delete_turns(self.db, normalize_user_id(user_id))

    async def prune_turns(self, before: datetime) -> int:
        async with _storage_errors("prune_turns"):
            return await conversation.delete_turns_before(self.db, format_timestamp(before))

    async def append_checkin(
        self,
        user_id: int | str,
        mood: str,
        intensity: int | None = None,
        activity: str | None = None,
        note: str | None = None,
        *,
        created_at: datetime | None = None,
    ) -> MoodCheckIn:
        async with _storage_errors("append_checkin"):
            row = await mood_repo.add_checkin(
                self.db,
                normalize_user_id(user_id),
                mood,
                DEFAULT_INTENSITY if intensity is None else intensity,
                format_timestamp(created_at or utcnow()),
                activity=activity,
                note=note,
            )
        return _checkin(row)

    async def query_checkins(
        self,
        user_id: int | str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> list[MoodCheckIn]:
        async with _storage_errors("query_checkins"):
            rows = await mood_repo.get_checkins(
                self.db,
                normalize_user_id(user_id),
                since=_ts(since),
                until=_ts(until),
                limit=limit,
            )
        return [_checkin(r) for r in rows]
