"""Environment-variable-based configuration."""

import os
from pathlib import Path


def get_log_level() -> str:
    """Return the logging level from CHM_LOG_LEVEL."""
    return os.environ.get("CHM_LOG_LEVEL", "WARNING").upper()


def get_llm_provider() -> str:
    """Return the generative-text provider name from CHM_LLM_PROVIDER."""
    return os.environ.get("CHM_LLM_PROVIDER", "openai").lower()


def get_openai_model() -> str:
    """Return the OpenAI chat model from CHM_OPENAI_MODEL."""
    return os.environ.get("CHM_OPENAI_MODEL", "gpt-4o")


def get_anthropic_model() -> str:
    """Return the Anthropic model from CHM_ANTHROPIC_MODEL."""
    return os.environ.get("CHM_ANTHROPIC_MODEL", "claude-3-5-haiku-latest")


def get_ollama_url() -> str:
    """Return the Ollama API URL from CHM_OLLAMA_URL."""
    return os.environ.get("CHM_OLLAMA_URL", "http://localhost:11434")


def get_ollama_model() -> str:
    """Return the Ollama chat model from CHM_OLLAMA_MODEL."""
    return os.environ.get("CHM_OLLAMA_MODEL", "llama3.1:8b")


def get_llm_timeout() -> float:
    """Return the generation timeout in seconds from CHM_LLM_TIMEOUT."""
    return float(os.environ.get("CHM_LLM_TIMEOUT", "30.0"))


def get_search_limit() -> int:
    """Return the default number of knowledge results from CHM_SEARCH_LIMIT."""
    return int(os.environ.get("CHM_SEARCH_LIMIT", "8"))


def get_history_window() -> int:
    """Return how many trailing conversation turns are sent to the LLM."""
    return int(os.environ.get("CHM_HISTORY_WINDOW", "6"))


def get_test_questions() -> int:
    """Return the default practice-test length from CHM_TEST_QUESTIONS."""
    return int(os.environ.get("CHM_TEST_QUESTIONS", "5"))


def get_knowledge_path() -> Path | None:
    """Return an override knowledge table path from CHM_KNOWLEDGE_PATH, if set."""
    raw = os.environ.get("CHM_KNOWLEDGE_PATH")
    return Path(raw).expanduser() if raw else None


def get_curriculum_path() -> Path | None:
    """Return an override curriculum table path from CHM_CURRICULUM_PATH, if set."""
    raw = os.environ.get("CHM_CURRICULUM_PATH")
    return Path(raw).expanduser() if raw else None
