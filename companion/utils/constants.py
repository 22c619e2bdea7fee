MAX_CONTEXT_TURNS = 100
MAX_CONTEXT_ITEMS = 20

SUMMARY_DAYS = 7
SUMMARY_MIN_TURNS = 3
SUMMARY_MAX_THEMES = 3

HISTORY_RETENTION_DAYS = 90

LLM_TIMEOUT = 60  # seconds
TYPING_INTERVAL = 4  # seconds, Telegram shows "typing" for ~5s

DEFAULT_INTENSITY = 3
MOOD_TREND_LENGTH = 7

MOOD_EMOJIS = {
    "happy": "\U0001f60a",
    "calm": "\U0001f60c",
    "neutral": "\U0001f610",
    "sad": "\U0001f614",
    "anxious": "\U0001f61f",
    "frustrated": "\U0001f624",
    "tired": "\U0001f634",
    "confused": "\U0001f914",
}
MOOD_LABELS = tuple(MOOD_EMOJIS)
