"""chm_ask MCP tool: conversational answers with fallback tiers."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from chm_assistant.models.conversation import ConversationTurn

logger = logging.getLogger(__name__)


def register_chm_ask(mcp: FastMCP) -> None:
    """Register the chm_ask tool with the MCP server."""

    @mcp.tool()
    async def chm_ask(
        message: Annotated[str, Field(description="The student's chat message")],
        history: Annotated[
            list[ConversationTurn] | None,
            Field(description="Prior turns, oldest first (role: user or assistant)"),
        ] = None,
        ctx: Context | None = None,
    ) -> str:
        """Answer a student's question about the CHM curriculum.

        Handles practice-test requests ("create a test for M1 week 3"), greetings,
        knowledge-base lookups and free-form questions. When the language model is
        unavailable the reply comes from curated fallback text, so this tool always
        returns an answer.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")

        orchestrator = ctx.lifespan_context["orchestrator"]
        return str(await orchestrator.answer(message, history or []))
