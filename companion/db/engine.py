import logging
import os

import aiosqlite

from companion.db.models import SCHEMA
from companion.errors import StorageError

logger = logging.getLogger(__name__)


async def get_db(db_path: str) -> aiosqlite.Connection:
    try:
        db = await aiosqlite.connect(db_path)
    except aiosqlite.Error as e:
        logger.warning("Cannot open database %s: %s", db_path, e)
        raise StorageError(f"cannot open database {db_path}: {e}") from e
    db.row_factory = aiosqlite.Row
    try:
        await db.execute("PRAGMA busy_timeout=5000")
        await db.execute("PRAGMA journal_mode=WAL")
        await db.execute("PRAGMA foreign_keys=ON")
    except aiosqlite.Error as e:
        await db.close()
        logger.warning("Cannot open database %s: %s", db_path, e)
        raise StorageError(f"cannot open database {db_path}: {e}") from e
    return db


async def apply_schema(db: aiosqlite.Connection) -> None:
    for statement in SCHEMA:
        await db.execute(statement)
    await db.commit()


async def init_db(db_path: str) -> None:
    directory = os.path.dirname(db_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    db = await get_db(db_path)
    try:
        await apply_schema(db)
    finally:
        await db.close()
