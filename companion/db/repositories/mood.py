import aiosqlite

from companion.db.repositories.user import ensure_user


async def add_checkin(
    db: aiosqlite.Connection,
    user_id: int,
    mood: str,
    intensity: int,
    created_at: str,
    activity: str | None = None,
    note: str | None = None,
) -> dict:
    await ensure_user(db, user_id)
    cursor = await db.execute(
        """
        INSERT INTO mood_checkins
            (user_id, mood, intensity, activity, note, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (user_id, mood, intensity, activity, note, created_at),
    )
    await db.commit()
    return {
        "id": cursor.lastrowid,
        "user_id": user_id,
        "mood": mood,
        "intensity": intensity,
        "activity": activity,
        "note": note,
        "created_at": created_at,
    }


async def get_checkins(
    db: aiosqlite.Connection,
    user_id: int,
    since: str | None = None,
    until: str | None = None,
    limit: int | None = None,
) -> list[dict]:
    clauses = ["user_id = ?"]
    params: list = [user_id]
    if since is not None:
        clauses.append("created_at >= ?")
        params.append(since)
    if until is not None:
        clauses.append("created_at <= ?")
        params.append(until)
    params.append(-1 if limit is None else limit)

    cursor = await db.execute(
        f"""
        SELECT * FROM (
            SELECT id, user_id, mood, intensity, activity, note, created_at
            FROM mood_checkins
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
