import unittest
from datetime import datetime, timezone

from companion.db.engine import apply_schema, get_db
from companion.db.store import Store

NOW = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)


async def open_store() -> Store:
    db = await get_db(":memory:")
    await apply_schema(db)
    return Store(db)


class StoreTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = await open_store()

    async def asyncTearDown(self):
        await self.store.db.close()
