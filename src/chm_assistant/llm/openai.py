"""OpenAI chat-completions client with graceful degradation."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from typing import Any

from chm_assistant.config import get_llm_timeout, get_openai_model
from chm_assistant.llm.provider import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, build_messages
from chm_assistant.models.conversation import ConversationTurn

logger = logging.getLogger(__name__)

_MIN_KEY_LENGTH = 20


def has_usable_api_key() -> bool:
    """True if OPENAI_API_KEY looks real (not missing, masked or a stub)."""
    key = os.environ.get("OPENAI_API_KEY", "")
    return len(key) >= _MIN_KEY_LENGTH and "*" not in key


class OpenAILLMClient:
    """Generates text via the OpenAI chat completions API."""

    def __init__(self) -> None:
        """Initialize with lazy client creation."""
        self._client: Any = None
        self._available: bool | None = None

    async def is_available(self) -> bool:
        """Check availability. Only caches success; retries on failure."""
        if self._available is True:
            return True
        if not has_usable_api_key():
            logger.warning("OPENAI_API_KEY missing or invalid; OpenAI LLM disabled")
            return False
        return self._get_client() is not None

    async def generate(
        self,
        message: str,
        *,
        system: str | None = None,
        history: Sequence[ConversationTurn] | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str | None:
        """Generate a reply. Returns None if unavailable or the call fails."""
        if not await self.is_available():
            return None
        try:
            client = self._get_client()
            if client is None:
                return None
            response = await client.chat.completions.create(
                model=get_openai_model(),
                messages=build_messages(message, system, history),
                max_tokens=max_tokens,
                temperature=temperature,
                timeout=get_llm_timeout(),
            )
            content: str | None = response.choices[0].message.content
            if not content:
                logger.warning("OpenAI returned an empty completion")
                return None
            self._available = True
            return content
        except Exception:
            logger.warning("OpenAI generation failed", exc_info=True)
            self._available = None
            return None

    def _get_client(self) -> Any:
        """Lazily create the AsyncOpenAI client. Returns None if SDK missing."""
        if self._client is None:
            try:
                from openai import AsyncOpenAI

                self._client = AsyncOpenAI()
            except ImportError:
                logger.warning("openai package not installed; OpenAI LLM disabled")
                return None
        return self._client

    async def close(self) -> None:
        """Close the OpenAI client if open."""
        if self._client is not None:
            await self._client.close()
            self._client = None
