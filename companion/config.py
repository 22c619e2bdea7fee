from dataclasses import dataclass
import os

from dotenv import load_dotenv

from companion.utils import constants

load_dotenv()


@dataclass(frozen=True)
class Settings:
    telegram_bot_token: str
    openrouter_api_key: str
    model: str = "stepfun/step-3.5-flash:free"
    db_path: str = "data/companion.db"
    max_context_turns: int = constants.MAX_CONTEXT_TURNS
    max_context_items: int = constants.MAX_CONTEXT_ITEMS
    summary_days: int = constants.SUMMARY_DAYS
    history_retention_days: int = constants.HISTORY_RETENTION_DAYS
    llm_timeout: int = constants.LLM_TIMEOUT
    log_level: str = "INFO"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def get_settings() -> Settings:
    token = os.getenv("TELEGRAM_BOT_TOKEN")
    api_key = os.getenv("OPENROUTER_API_KEY")
    if not token:
        raise ValueError("TELEGRAM_BOT_TOKEN is not set in .env")
    if not api_key:
        raise ValueError("OPENROUTER_API_KEY is not set in .env")
    settings = Settings(
        telegram_bot_token=token,
        openrouter_api_key=api_key,
        model=os.getenv("MODEL") or Settings.model,
        db_path=os.getenv("DB_PATH") or Settings.db_path,
        max_context_turns=_int_env("MAX_CONTEXT_TURNS", Settings.max_context_turns),
        max_context_items=_int_env("MAX_CONTEXT_ITEMS", Settings.max_context_items),
        summary_days=_int_env("SUMMARY_DAYS", Settings.summary_days),
        history_retention_days=_int_env("HISTORY_RETENTION_DAYS", Settings.history_retention_days),
        llm_timeout=_int_env("LLM_TIMEOUT", Settings.llm_timeout),
        log_level=os.getenv("LOG_LEVEL") or Settings.log_level,
    )
    for name in ("max_context_turns", "max_context_items", "summary_days", "history_retention_days"):
        if getattr(settings, name) < 0:
            raise ValueError(f"{name.upper()} must not be negative")
    return settings
