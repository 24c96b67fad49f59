"""LLM provider module."""

from chm_assistant.llm.anthropic import AnthropicLLMClient
from chm_assistant.llm.ollama import OllamaLLMClient
from chm_assistant.llm.openai import OpenAILLMClient
from chm_assistant.llm.provider import LLMProvider

__all__ = ["AnthropicLLMClient", "LLMProvider", "OllamaLLMClient", "OpenAILLMClient"]
