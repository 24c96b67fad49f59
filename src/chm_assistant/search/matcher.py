"""Keyword-weighted relevance ranking over the knowledge store."""

import logging
import string
from datetime import UTC, date, datetime

from chm_assistant.models.knowledge import KnowledgeItem
from chm_assistant.models.search import MatchWeights, ScoredMatch
from chm_assistant.store.knowledge_store import KnowledgeStore

logger = logging.getLogger(__name__)

_STRIP_CHARS = string.punctuation + "’“”"


def tokenize(query: str, min_length: int = 3) -> list[str]:
    """Lowercase whitespace tokens, punctuation trimmed, short tokens dropped."""
    tokens = (raw.strip(_STRIP_CHARS) for raw in query.lower().split())
    return [t for t in tokens if len(t) >= min_length]


def _as_date(now: datetime | date | None) -> date:
    if now is None:
        return datetime.now(UTC).date()
    if isinstance(now, datetime):
        return now.date()
    return now


class QueryMatcher:
    """Scores every knowledge item against a free-text query."""

    def __init__(self, store: KnowledgeStore, weights: MatchWeights | None = None) -> None:
        """Initialize with a store and optional weight overrides."""
        self._store = store
        self.weights = weights or MatchWeights()

    def match_score(self, item: KnowledgeItem, tokens: list[str]) -> float:
        """Field-hit portion of the score, before priority and recency."""
        w = self.weights
        title = item.title.lower()
        tags = [t.lower() for t in item.tags]
        category = item.category.lower()
        subcategory = (item.subcategory or "").lower()

        score = 0.0
        for token in tokens:
            if token in title:
                score += w.title
            if any(token in tag for tag in tags):
                score += w.tag
            if token in category or token in subcategory:
                score += w.category
            if token in item.searchable_text:
                score += w.full_text
        return score

    def recency_bonus(self, item: KnowledgeItem, today: date) -> float:
        """Bonus for items updated within the recency window."""
        age_days = (today - item.last_updated).days
        if age_days < self.weights.recency_window_days:
            return self.weights.recency_bonus
        return 0.0

    def score(
        self, item: KnowledgeItem, tokens: list[str], now: datetime | date | None = None
    ) -> float | None:
        """Total score for an item, or None when no field matched at all."""
        matched = self.match_score(item, tokens)
        if matched <= 0:
            return None
        return matched + item.priority + self.recency_bonus(item, _as_date(now))

    def rank(
        self, query: str, limit: int, now: datetime | date | None = None
    ) -> list[ScoredMatch]:
        """Top items for query, best first.

        Ties are broken by priority, then by load order. An empty query (or one
        made only of short tokens) returns no results.
        """
        if limit <= 0:
            return []
        tokens = tokenize(query, self.weights.min_token_length)
        if not tokens:
            return []

        today = _as_date(now)
        floor = self.weights.relevance_floor
        scored: list[ScoredMatch] = []
        for item in self._store.all():
            total = self.score(item, tokens, today)
            if total is None or total <= floor:
                continue
            scored.append(ScoredMatch(item=item, score=total))

        # sorted() is stable, so equal keys keep load order
        scored = sorted(scored, key=lambda m: (-m.score, -m.item.priority))
        logger.debug("Query %r matched %d items", query, len(scored))
        return scored[:limit]
