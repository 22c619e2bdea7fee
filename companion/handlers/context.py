import html

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from companion.config import Settings
from companion.db.models import TurnKind
from companion.db.repositories.conversation import estimate_tokens
from companion.db.store import Store
from companion.services import history
from companion.services.context import build_context
from companion.services.summary import summarize

router = Router()


@router.message(Command("context"))
async def cmd_context(message: Message, store: Store, settings: Settings) -> None:
    user_id = message.from_user.id
    counts = await history.stats(store, user_id)
    window = await build_context(
        store,
        user_id,
        message.chat.id,
        settings.max_context_turns,
        settings.max_context_items,
    )
    themes = await summarize(store, user_id, settings.summary_days)

    roles = [m["role"] for m in window]
    tokens = sum(estimate_tokens(m["content"]) for m in window)
    lines = [
        "🧠 <b>What I remember</b>\n",
        "<b>Total history</b>",
        f"• Your messages: {counts[TurnKind.USER_MESSAGE]}",
        f"• My replies: {counts[TurnKind.AI_RESPONSE]}",
        f"• Channel context: {counts[TurnKind.CHANNEL_CONTEXT]}\n",
        "<b>Used in my next reply</b>",
        f"• Messages: {len(window)} (~{tokens} tokens)",
        f"• Yours: {roles.count('user')}, mine: {roles.count('assistant')}, "
        f"channel: {roles.count('system')}\n",
        f"<b>Recent themes ({settings.summary_days} days)</b>",
        html.escape(themes) if themes else "No recurring themes yet.",
    ]
    await message.answer("\n".join(lines), parse_mode="HTML")
