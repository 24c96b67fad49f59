"""Ollama LLM client with graceful degradation."""

import logging
from collections.abc import Sequence

import httpx

from chm_assistant.config import get_llm_timeout, get_ollama_model, get_ollama_url
from chm_assistant.llm.provider import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, build_messages
from chm_assistant.models.conversation import ConversationTurn

logger = logging.getLogger(__name__)


class OllamaLLMClient:
    """Generates text via Ollama's /api/chat endpoint."""

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        """Initialize with an optional HTTP client."""
        self._http = http_client
        self._available: bool | None = None

    async def is_available(self) -> bool:
        """Check if Ollama is reachable. Only caches success; retries on failure."""
        if self._available is True:
            return True
        try:
            client = self._get_client()
            resp = await client.get(f"{get_ollama_url()}/api/tags", timeout=get_llm_timeout())
            resp.raise_for_status()
            self._available = True
        except Exception:
            logger.warning("Ollama not available; LLM disabled")
            self._available = None
        return self._available is True

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
            payload: dict[str, object] = {
                "model": get_ollama_model(),
                "messages": build_messages(message, system, history),
                "stream": False,
                "options": {"num_predict": max_tokens, "temperature": temperature},
            }
            resp = await client.post(
                f"{get_ollama_url()}/api/chat",
                json=payload,
                timeout=get_llm_timeout(),
            )
            resp.raise_for_status()
            data = resp.json()
            result: str = data["message"]["content"]
            return result or None
        except Exception:
            logger.warning("LLM generation failed", exc_info=True)
            self._available = None
            return None

    def _get_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient()
        return self._http

    async def close(self) -> None:
        """Close the HTTP client if open."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
