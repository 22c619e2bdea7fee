import aiosqlite

from companion.db.repositories.user import ensure_user


def estimate_tokens(text: str) -> int:
    return max(1, len(text.encode("utf-8")) // 4)


async def add_turn(
    db: aiosqlite.Connection,
    user_id: int,
    kind: str,
    content: str,
    created_at: str,
    channel_id: int | None = None,
) -> dict:
    tokens_est = estimate_tokens(content)
    await ensure_user(db, user_id)
    cursor = await db.execute(
        """
        INSERT INTO conversation_turns
            (user_id, channel_id, kind, content, tokens_est, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (user_id, channel_id, kind, content, tokens_est, created_at),
    )
    await db.commit()
    return {
        "id": cursor.lastrowid,
        "user_id": user_id,
        "channel_id": channel_id,
        "kind": kind,
        "content": content,
        "tokens_est": tokens_est,
        "created_at": created_at,
    }


async def get_turns(
    db: aiosqlite.Connection,
    user_id: int,
    since: str | None = None,
    until: str | None = None,
    limit: int | None = None,
) -> list[dict]:
    """Return turns oldest-to-newest; with a limit, only the newest ones."""
    clauses = ["user_id = ?"]
    params: list = [user_id]
    if since is not None:
        clauses.append("created_at >= ?")
        params.append(since)
    if until is not None:
        clauses.append("created_at <= ?")
        params.append(until)
    # LIMIT -1 means no limit in SQLite
    params.append(-1 if limit is None else limit)

    cursor = await db.execute(
        f"""
        SELECT * FROM (
            SELECT id, user_id, channel_id, kind, content, tokens_est, created_at
            FROM conversation_turns
            WHERE {" AND ".join(clauses)}
            ORDER BY created_at DESC, id DESC
            LIMIT ?
        )
        ORDER BY created_at ASC, id ASC
        """,
        params,
    )
    rows = await cursor.fetchall()
    return [dict(r) for r in rows]


async def count_turns(
    db: aiosqlite.Connection,
    user_id: int,
) -> dict[str, int]:
    cursor = await db.execute(
        """
        SELECT kind, COUNT(*) AS n
        FROM conversation_turns
        WHERE user_id = ?
        GROUP BY kind
        """,
        (user_id,),
    )
    rows = await cursor.fetchall()
    return {r["kind"]: r["n"] for r in rows}


async def delete_turns(
    db: aiosqlite.Connection,
    user_id: int,
) -> int:
    cursor = await db.execute(
        "DELETE FROM conversation_turns WHERE user_id = ?",
        (user_id,),
    )
    await db.commit()
    return cursor.rowcount


async def delete_turns_before(
    db: aiosqlite.Connection,
    before: str,
) -> int:
    cursor = await db.execute(
        "DELETE FROM conversation_turns WHERE created_at < ?",
        (before,),
    )
    await db.commit()
    return cursor.rowcount
