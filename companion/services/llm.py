import asyncio
import logging
import re

import aiohttp

from companion.errors import ServiceError
from companion.utils.constants import LLM_TIMEOUT

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
MAX_RETRIES = 3
RETRY_DELAYS = [2, 5, 10]

_think_pattern = re.compile(r"<think>.*?</think>", re.DOTALL)


def _strip_think(text: str) -> str:
    return _think_pattern.sub("", text).strip()


class LLMClient:
    """OpenRouter chat-completions client.

    Owns one aiohttp session for the process; call ``close()`` on shutdown.
    Every failure surfaces as ``ServiceError`` so the caller can pick the
    fallback text shown to the user.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        url: str = OPENROUTER_URL,
        timeout: float = LLM_TIMEOUT,
        retry_delays: list[float] | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.url = url
        self.timeout = timeout
        self.retry_delays = RETRY_DELAYS if retry_delays is None else retry_delays
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def chat_completion(self, messages: list[dict]) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": messages,
            "include_reasoning": False,
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        data: dict | None = None

        for attempt in range(MAX_RETRIES):
            try:
                session = self._get_session()
                async with session.post(
                    self.url, json=payload, headers=headers, timeout=timeout
                ) as resp:
                    if resp.status == 429:
                        body = await resp.text()
                        logger.warning(
                            "Rate limited (attempt %d/%d): %s",
                            attempt + 1, MAX_RETRIES, body,
                        )
                        if attempt < MAX_RETRIES - 1:
                            await asyncio.sleep(self.retry_delays[attempt])
                            continue
                        raise ServiceError("AI service is rate limited")

                    if resp.status != 200:
                        body = await resp.text()
                        logger.error("OpenRouter error %s: %s", resp.status, body)
                        raise ServiceError(f"AI service returned HTTP {resp.status}")

                    try:
                        data = await resp.json()
                    except (ValueError, aiohttp.ContentTypeError) as e:
                        body = await resp.text()
                        logger.error("Invalid JSON from OpenRouter: %s: %s", e, body[:500])
                        raise ServiceError("AI service returned invalid JSON") from e
            except asyncio.TimeoutError as e:
                logger.warning("LLM timeout (attempt %d/%d)", attempt + 1, MAX_RETRIES)
                if attempt < MAX_RETRIES - 1:
                    continue
                raise ServiceError("AI service timed out") from e
            except aiohttp.ClientError as e:
                logger.error("HTTP error: %s", e)
                raise ServiceError(f"AI service connection failed: {e}") from e
            else:
                break

        if data is None:
            raise ServiceError("AI service gave no response")

        try:
            raw = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            logger.error("Unexpected OpenRouter response: %s", data)
            raise ServiceError("AI service returned an unexpected payload") from e

        text = _strip_think(raw) if raw else ""
        if not text:
            raise ServiceError("AI service returned an empty reply")
        return text
