"""
Title generation for captured notes.

TitleGenerator gives the capture flow a stable, provider‑agnostic API:

    titles = TitleGenerator(provider="heuristic")
    title = await titles.generate("some raw note text")

Providers:

    • "heuristic"  — first seven words of the note, offline and deterministic
    • "anthropic"  — asks a small Claude model for a 5–7 word summary, and
                     falls back to the heuristic on any failure

A title is never a reason to lose a note: generate() does not raise for
network or response problems.
"""

from typing import Any, Optional

import httpx

from notesync.logging_utils import get_logger

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-haiku-4-5-20251001"
TITLE_TIMEOUT = 30.0
MAX_TITLE_WORDS = 7
EMPTY_TITLE = "Voice note"

SUPPORTED_PROVIDERS = ("heuristic", "anthropic")

SYSTEM_PROMPT = (
    "Summarize the following text as a short title of 5-7 words, in the same "
    "language as the text. Do not end the title with any punctuation. "
    "Reply with the title only, nothing else."
)

FORBIDDEN_FILENAME_CHARS = '/:\\?*"<>|'

logger = get_logger(__name__)


def fallback_title(text: str) -> str:
    """First seven whitespace‑delimited words, or a placeholder for empty text."""
    words = text.split()
    if not words:
        return EMPTY_TITLE
    return " ".join(words[:MAX_TITLE_WORDS])


def sanitize_title(name: str) -> str:
    """Drop characters that are not allowed in file names or logical paths."""
    return "".join(ch for ch in name if ch not in FORBIDDEN_FILENAME_CHARS).strip()


def _reply_text(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    content = payload.get("content")
    if not isinstance(content, list) or not content or not isinstance(content[0], dict):
        return None
    text = content[0].get("text")
    if not isinstance(text, str) or not text.strip():
        return None
    return text.strip()


class TitleGenerator:
    """
    Minimal title generator abstraction.

    Parameters
    ----------
    provider : str
        "heuristic" or "anthropic". Anything else fails loudly.
    api_key : str | None
        Required for the "anthropic" provider.
    model : str
        Model name sent to the Messages API.
    transport : httpx.AsyncBaseTransport | None
        Optional transport override for tests.
    """

    def __init__(
        self,
        provider: str = "heuristic",
        api_key: Optional[str] = None,
        *,
        model: str = DEFAULT_MODEL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if provider not in SUPPORTED_PROVIDERS:
            raise NotImplementedError(
                f"Provider '{provider}' is not implemented. "
                f"Currently supported: {', '.join(SUPPORTED_PROVIDERS)}."
            )
        if provider == "anthropic" and not api_key:
            raise ValueError("The 'anthropic' provider requires an API key")

        self.provider = provider
        self.api_key = api_key
        self.model = model
        self._transport = transport

    @classmethod
    def for_api_key(cls, api_key: Optional[str], **kwargs) -> "TitleGenerator":
        """Use the model when a key is configured, the heuristic otherwise."""
        if api_key:
            return cls(provider="anthropic", api_key=api_key, **kwargs)
        return cls(provider="heuristic")

    async def generate(self, text: str) -> str:
        if self.provider == "heuristic" or not text.strip():
            return fallback_title(text)

        try:
            title = await self._ask_model(text)
        except (httpx.HTTPError, ValueError) as e:
            logger.info("title generation failed, using heuristic: %s", e)
            return fallback_title(text)

        return title or fallback_title(text)

    async def _ask_model(self, text: str) -> Optional[str]:
        body = {
            "model": self.model,
            "max_tokens": 50,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": text.strip()}],
        }
        headers = {
            "x-api-key": self.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(transport=self._transport, timeout=TITLE_TIMEOUT) as client:
            response = await client.post(ANTHROPIC_URL, json=body, headers=headers)
            response.raise_for_status()
            return _reply_text(response.json())
