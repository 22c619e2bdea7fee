SYSTEM_PROMPT = """You are a supportive companion living inside a chat app. \
You are not a therapist, but a safe, calm and empathetic presence for people \
to talk to when things feel heavy, confusing or overwhelming.

- Listen without judgment, reflect feelings and offer gentle support.
- Encourage self-reflection and emotional awareness.
- Share simple coping tools (grounding, breathing, affirmations) when asked.
- Never diagnose, give medical advice or claim to be a therapist.
- If someone expresses serious distress, gently recommend professional help.

Use clear, simple language and keep replies short enough for a chat message."""

THEMES_NOTE = (
    "Recurring themes from this person's conversations over the last {days} days: "
    "{summary}. Use this only as background, do not list it back to them."
)

WELCOME_MESSAGE = (
    "Hi! I'm here to listen whenever you want to talk.\n\n"
    "Just write to me, or use <b>/checkin</b> to log how you feel. "
    "See <b>/help</b> for everything I can do."
)

HELP_MESSAGE = (
    "<b>Commands</b>\n"
    "/checkin - log your current mood\n"
    "/insights [week|month|all] - trends from your check-ins\n"
    "/context - what I remember from our conversations\n"
    "/reset - clear our conversation history\n"
    "/help - this message\n\n"
    "Anything else you write goes straight to me."
)

AI_FALLBACK = (
    "I'm sorry, I'm having trouble answering right now. "
    "Please try again in a little while."
)

STORAGE_FALLBACK = "Sorry, I couldn't reach my memory just now. Please try again later."
