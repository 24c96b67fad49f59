"""chm_search MCP tool: keyword search over the curriculum knowledge table."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from chm_assistant.search.lookup import search_knowledge
from chm_assistant.tools.formatters import assemble_response

logger = logging.getLogger(__name__)


def register_chm_search(mcp: FastMCP) -> None:
    """Register the chm_search tool with the MCP server."""

    @mcp.tool()
    async def chm_search(
        query: Annotated[str, Field(description="Keywords, or 'show me CHM <tag> topics'")],
        limit: Annotated[
            int, Field(description="Maximum results to return (1-20)", ge=1, le=20)
        ] = 5,
        ctx: Context | None = None,
    ) -> str:
        """Search the CHM knowledge table without calling a language model.

        Title, tag and category hits outrank body-text hits. A query shaped like
        "show me CHM research topics" lists every item tagged with that word.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")

        lifespan = ctx.lifespan_context
        result = search_knowledge(lifespan["store"], lifespan["matcher"], query, limit)
        logger.debug("chm_search %r returned %d items", query, len(result.matches))
        return assemble_response(result)
