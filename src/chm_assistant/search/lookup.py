"""Route a query to tag browsing or weighted matching."""

import logging
from datetime import date, datetime

from chm_assistant.models.search import ScoredMatch, SearchResult
from chm_assistant.search.matcher import QueryMatcher
from chm_assistant.search.tag_query import detect_tag_query
from chm_assistant.store.knowledge_store import KnowledgeStore

logger = logging.getLogger(__name__)


def search_knowledge(
    store: KnowledgeStore,
    matcher: QueryMatcher,
    query: str,
    limit: int,
    now: datetime | date | None = None,
) -> SearchResult:
    """Search the knowledge store.

    Queries shaped like "show me CHM <tag> topics" return exactly
    store.by_tag(<tag>) truncated to limit and are marked as a tag browse.
    Everything else goes through the weighted matcher.
    """
    tag = detect_tag_query(query)
    if tag is not None:
        items = store.by_tag(tag)[: max(limit, 0)]
        logger.debug("Tag browse for %r returned %d items", tag, len(items))
        return SearchResult(
            query=query,
            matches=[ScoredMatch(item=item, score=float(item.priority)) for item in items],
            browse_tag=tag,
        )

    return SearchResult(query=query, matches=matcher.rank(query, limit, now))
