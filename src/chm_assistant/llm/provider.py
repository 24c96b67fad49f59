"""LLM provider protocol for pluggable language model backends."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from chm_assistant.models.conversation import ConversationTurn

DEFAULT_MAX_TOKENS = 800
DEFAULT_TEMPERATURE = 0.7


@runtime_checkable
class LLMProvider(Protocol):
    """Protocol for language model providers with graceful degradation."""

    async def is_available(self) -> bool:
        """Check if the LLM backend is usable."""
        ...

    async def generate(
        self,
        message: str,
        *,
        system: str | None = None,
        history: Sequence[ConversationTurn] | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str | None:
        """Generate a reply to message. Returns None if generation failed."""
        ...

    async def close(self) -> None:
        """Release resources."""
        ...


def build_messages(
    message: str,
    system: str | None,
    history: Sequence[ConversationTurn] | None,
) -> list[dict[str, str]]:
    """Chat-completions message list: system, prior turns, then the new message."""
    messages: list[dict[str, str]] = []
    if system is not None:
        messages.append({"role": "system", "content": system})
    messages.extend(turn.as_message() for turn in history or ())
    messages.append({"role": "user", "content": message})
    return messages
