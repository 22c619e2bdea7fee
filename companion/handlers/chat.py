import asyncio
import logging

from aiogram import Router, F
from aiogram.enums import ChatAction, ChatType
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.types import Message

from companion.config import Settings
from companion.db.models import TurnKind
from companion.db.store import Store
from companion.errors import ServiceError
from companion.services import history
from companion.services.context import ContextRequest, build_context_for, build_messages
from companion.services.llm import LLMClient
from companion.services.summary import summarize
from companion.utils.constants import TYPING_INTERVAL
from companion.utils.formatting import md_to_html, sanitize_html
from companion.utils.prompts import AI_FALLBACK, SYSTEM_PROMPT

logger = logging.getLogger(__name__)

_MAX_CHUNK = 3500  # leave room for HTML tags added by md_to_html

router = Router()


def _split_response(text: str, max_len: int = _MAX_CHUNK) -> list[str]:
    """Split text on paragraph boundaries, falling back to line/word/hard split."""
    chunks: list[str] = []
    while len(text) > max_len:
        for sep in ("\n\n", "\n", " "):
            cut = text.rfind(sep, 0, max_len)
            if cut > 0:
                chunks.append(text[:cut])
                text = text[cut + len(sep):]
                break
        else:
            chunks.append(text[:max_len])
            text = text[max_len:]
    if text:
        chunks.append(text)
    return chunks


async def _typing_keepalive(chat_id: int, bot, stop_event: asyncio.Event) -> None:
    while not stop_event.is_set():
        try:
            await bot.send_chat_action(chat_id=chat_id, action=ChatAction.TYPING)
        except TelegramAPIError as e:
            logger.debug("Typing action failed for chat %s: %s", chat_id, e)
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=TYPING_INTERVAL)
            break
        except asyncio.TimeoutError:
            continue


async def _safe_answer(message: Message, text: str) -> None:
    """Convert LLM Markdown to HTML, send with fallback to plain text."""
    html_text = sanitize_html(md_to_html(text))
    try:
        await message.answer(html_text, parse_mode="HTML")
    except TelegramBadRequest:
        await message.answer(text)


async def _addressed_to_bot(message: Message) -> bool:
    if message.chat.type == ChatType.PRIVATE:
        return True
    me = await message.bot.me()
    reply = message.reply_to_message
    if reply is not None and reply.from_user is not None and reply.from_user.id == me.id:
        return True
    return bool(me.username) and f"@{me.username}".lower() in message.text.lower()


@router.message(F.text)
async def handle_text(message: Message, store: Store, settings: Settings, llm: LLMClient) -> None:
    user_id = message.from_user.id
    chat_id = message.chat.id

    if not await _addressed_to_bot(message):
        # Group chatter the bot was not asked about: keep it as ambient context only.
        await history.append(
            store, user_id, message.text, TurnKind.CHANNEL_CONTEXT, channel_id=chat_id
        )
        return

    await store.upsert_user(
        user_id,
        username=message.from_user.username,
        first_name=message.from_user.first_name,
        language_code=message.from_user.language_code,
    )
    await history.append(store, user_id, message.text, TurnKind.USER_MESSAGE, channel_id=chat_id)

    request = ContextRequest(
        user_id=user_id,
        channel_id=chat_id,
        max_turns=settings.max_context_turns,
        max_context_items=settings.max_context_items,
    )
    context = await build_context_for(store, request)
    themes = await summarize(store, user_id, settings.summary_days)
    messages = build_messages(
        SYSTEM_PROMPT, context, summary=themes, summary_days=settings.summary_days
    )

    stop_typing = asyncio.Event()
    typing_task = asyncio.create_task(_typing_keepalive(chat_id, message.bot, stop_typing))
    try:
        response = await llm.chat_completion(messages)
    except ServiceError:
        logger.exception("AI reply failed for user %s", user_id)
        response = None
    finally:
        stop_typing.set()
        await typing_task

    if response is None:
        await message.answer(AI_FALLBACK)
        return

    await history.append(store, user_id, response, TurnKind.AI_RESPONSE, channel_id=chat_id)
    for chunk in _split_response(response):
        await _safe_answer(message, chunk)
