from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.fsm.storage.memory import MemoryStorage

from companion.config import Settings
from companion.handlers import register_all_handlers
from companion.middlewares.store import StoreMiddleware
from companion.services.llm import LLMClient


def create_bot(settings: Settings) -> Bot:
    return Bot(
        token=settings.telegram_bot_token,
        default=DefaultBotProperties(parse_mode=None),
    )


def create_llm(settings: Settings) -> LLMClient:
    return LLMClient(
        settings.openrouter_api_key,
        settings.model,
        timeout=settings.llm_timeout,
    )


def create_dispatcher(settings: Settings, llm: LLMClient) -> Dispatcher:
    dp = Dispatcher(storage=MemoryStorage())

    store_middleware = StoreMiddleware(settings, llm)
    dp.message.middleware(store_middleware)
    dp.callback_query.middleware(store_middleware)

    register_all_handlers(dp)

    return dp
