"""FastMCP server with lifespan management and tool registration."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from chm_assistant.chat.orchestrator import ChatOrchestrator
from chm_assistant.config import (
    get_curriculum_path,
    get_history_window,
    get_knowledge_path,
    get_llm_provider,
    get_log_level,
    get_search_limit,
    get_test_questions,
)
from chm_assistant.llm import AnthropicLLMClient, OllamaLLMClient, OpenAILLMClient
from chm_assistant.llm.provider import LLMProvider
from chm_assistant.quiz.curriculum import CurriculumCatalog
from chm_assistant.quiz.generator import TestGenerator
from chm_assistant.search.matcher import QueryMatcher
from chm_assistant.store.knowledge_store import KnowledgeStore
from chm_assistant.store.loader import (
    load_curriculum,
    load_default_curriculum,
    load_default_knowledge,
    load_default_question_bank,
    load_knowledge,
)
from chm_assistant.tools.chm_ask import register_chm_ask
from chm_assistant.tools.chm_create_test import register_chm_create_test
from chm_assistant.tools.chm_search import register_chm_search


def _create_llm(provider: str) -> LLMProvider | None:
    """Create an LLM client for the given provider name."""
    if provider == "openai":
        return OpenAILLMClient()
    if provider == "anthropic":
        return AnthropicLLMClient()
    if provider == "ollama":
        return OllamaLLMClient()
    return None


def build_resources(llm: LLMProvider | None) -> dict[str, Any]:
    """Load the static tables and wire up the core objects."""
    knowledge_path = get_knowledge_path()
    curriculum_path = get_curriculum_path()
    items = load_knowledge(knowledge_path) if knowledge_path else load_default_knowledge()
    weeks = load_curriculum(curriculum_path) if curriculum_path else load_default_curriculum()

    store = KnowledgeStore(items)
    matcher = QueryMatcher(store)
    catalog = CurriculumCatalog(weeks)
    generator = TestGenerator(catalog, load_default_question_bank(), llm)
    orchestrator = ChatOrchestrator(
        store,
        matcher,
        catalog,
        generator,
        llm,
        search_limit=get_search_limit(),
        history_window=get_history_window(),
        test_questions=get_test_questions(),
    )
    return {
        "store": store,
        "matcher": matcher,
        "catalog": catalog,
        "generator": generator,
        "llm": llm,
        "orchestrator": orchestrator,
    }


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Load the knowledge tables and manage the LLM client lifecycle."""
    # Configure logging to stderr (stdout is MCP stdio transport)
    logging.basicConfig(
        level=getattr(logging, get_log_level()),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger(__name__)

    provider = get_llm_provider()
    llm = _create_llm(provider)
    if llm is not None and await llm.is_available():
        logger.info("LLM provider: %s", provider)
    else:
        logger.warning("LLM not available (%s); answering from fallback text only", provider)

    resources = build_resources(llm)
    logger.info("Knowledge store ready with %d items", len(resources["store"]))

    try:
        yield resources
    finally:
        if llm is not None:
            await llm.close()
            logger.info("LLM client closed")


_INSTRUCTIONS = """\
This server answers questions from medical students at the MSU College of \
Human Medicine (CHM) about their curriculum, learning societies, research \
opportunities and board preparation.

TOOLS:
- chm_ask: Conversational answer. Pass the student's message and, for \
follow-ups like "harder" or "explain more", the prior turns as history. \
Also handles practice-test requests such as "create a test for M1 week 3".
- chm_search: Direct knowledge-table lookup with no language model. Use \
"show me CHM <tag> topics" to list everything tagged with a word.
- chm_create_test: Structured practice test for a phase (M1, MCE, LCE) and week, \
with optional difficulty (easy, medium, difficult, mixed) and focus sub-topics.
- chm_topic_test: Question-bank test for a body system such as renal or cardio.
"""


def create_server() -> FastMCP:
    """Create and configure the MCP server with all tools."""
    mcp = FastMCP(
        "chm-assistant",
        instructions=_INSTRUCTIONS,
        lifespan=lifespan,
    )

    register_chm_ask(mcp)
    register_chm_search(mcp)
    register_chm_create_test(mcp)

    return mcp
