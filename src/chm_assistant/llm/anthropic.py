"""Anthropic LLM client with graceful degradation."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from typing import Any

from chm_assistant.config import get_anthropic_model, get_llm_timeout
from chm_assistant.llm.provider import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE
from chm_assistant.models.conversation import ConversationTurn, Role

logger = logging.getLogger(__name__)


def _to_messages(
    message: str, history: Sequence[ConversationTurn] | None
) -> list[dict[str, str]]:
    """Messages API list. Leading assistant turns are dropped; the API wants user first."""
    turns = list(history or ())
    while turns and turns[0].role is not Role.USER:
        turns.pop(0)
    messages = [turn.as_message() for turn in turns]
    messages.append({"role": "user", "content": message})
    return messages


class AnthropicLLMClient:
    """Generates text via the Anthropic Messages API."""

    def __init__(self) -> None:
        """Initialize with lazy client creation."""
        self._client: Any = None
        self._available: bool | None = None

    async def is_available(self) -> bool:
        """Check availability. Only caches success; retries on failure."""
        if self._available is True:
            return True
        if not os.environ.get("ANTHROPIC_API_KEY"):
            logger.warning("ANTHROPIC_API_KEY not set; Anthropic LLM disabled")
            return False
        # Key is set; the first generate() confirms and caches availability
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

            kwargs: dict[str, Any] = {
                "model": get_anthropic_model(),
                "max_tokens": max_tokens,
                "temperature": temperature,
                "messages": _to_messages(message, history),
            }
            if system is not None:
                kwargs["system"] = system

            response = await client.messages.create(
                **kwargs,
                timeout=get_llm_timeout(),
            )
            result: str = response.content[0].text
            self._available = True
            return result
        except Exception:
            logger.warning("Anthropic generation failed", exc_info=True)
            self._available = None
            return None

    def _get_client(self) -> Any:
        """Lazily create the AsyncAnthropic client. Returns None if SDK missing."""
        if self._client is None:
            try:
                from anthropic import AsyncAnthropic

                self._client = AsyncAnthropic()
            except ImportError:
                logger.warning("anthropic package not installed; Anthropic LLM disabled")
                return None
        return self._client

    async def close(self) -> None:
        """Close the Anthropic client if open."""
        if self._client is not None:
            await self._client.close()
            self._client = None
