from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

# Fixed-width UTC text, so that string order in SQL is time order.
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        user_id INTEGER PRIMARY KEY,
        username TEXT,
        first_name TEXT,
        language_code TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS conversation_turns (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL REFERENCES users(user_id),
        channel_id INTEGER,
        kind TEXT NOT NULL
            CHECK(kind IN ('user_message', 'ai_response', 'channel_context')),
        content TEXT NOT NULL,
        tokens_est INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_turns_user_id
    ON conversation_turns(user_id, created_at)
    """,
    """
    CREATE TABLE IF NOT EXISTS mood_checkins (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL REFERENCES users(user_id),
        mood TEXT NOT NULL,
        intensity INTEGER NOT NULL DEFAULT 3 CHECK(intensity BETWEEN 1 AND 5),
        activity TEXT,
        note TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_checkins_user_id
    ON mood_checkins(user_id, created_at)
    """,
]


class TurnKind(str, Enum):
    USER_MESSAGE = "user_message"
    AI_RESPONSE = "ai_response"
    CHANNEL_CONTEXT = "channel_context"

    @property
    def role(self) -> str:
        return _ROLES[self]


_ROLES = {
    TurnKind.USER_MESSAGE: "user",
    TurnKind.AI_RESPONSE: "assistant",
    TurnKind.CHANNEL_CONTEXT: "system",
}


@dataclass(frozen=True)
class ConversationTurn:
    id: int
    user_id: int
    kind: TurnKind
    content: str
    created_at: datetime
    channel_id: int | None = None
    tokens_est: int = 0


@dataclass(frozen=True)
class MoodCheckIn:
    id: int
    user_id: int
    mood: str
    intensity: int | None
    created_at: datetime
    activity: str | None = None
    note: str | None = None


def format_timestamp(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_user_id(value: int | str) -> int:
    """Turn a platform user id (int or decimal string) into an int."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid user id: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValueError(f"Invalid user id: {value!r}")
