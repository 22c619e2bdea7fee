import logging
from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from companion.config import Settings
from companion.db.engine import get_db
from companion.db.store import Store
from companion.errors import StorageError
from companion.services.llm import LLMClient
from companion.utils.prompts import STORAGE_FALLBACK

logger = logging.getLogger(__name__)


class StoreMiddleware(BaseMiddleware):
    """Hand each update its own store connection plus the shared settings and AI client."""

    def __init__(self, settings: Settings, llm: LLMClient) -> None:
        self.settings = settings
        self.llm = llm

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        try:
            db = await get_db(self.settings.db_path)
        except StorageError:
            await _apologize(event)
            return None

        data["store"] = Store(db)
        data["settings"] = self.settings
        data["llm"] = self.llm
        try:
            return await handler(event, data)
        except StorageError:
            logger.exception("Storage failure while handling update")
            await _apologize(event)
            return None
        finally:
            await db.close()


async def _apologize(event: TelegramObject) -> None:
    answer = getattr(event, "answer", None)
    if answer is None:
        return
    try:
        await answer(STORAGE_FALLBACK)
    except Exception:
        logger.warning("Failed to send storage apology", exc_info=True)
