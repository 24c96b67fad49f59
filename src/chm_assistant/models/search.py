"""Search-related models."""

from pydantic import BaseModel, ConfigDict, Field

from chm_assistant.models.knowledge import KnowledgeItem


class MatchWeights(BaseModel):
    """Field weights and thresholds used by the query matcher."""

    model_config = ConfigDict(extra="forbid")

    title: float = 15.0
    tag: float = 12.0
    category: float = 8.0
    full_text: float = 2.0
    recency_bonus: float = 3.0
    recency_window_days: int = Field(default=30, ge=0)
    relevance_floor: float = 5.0
    min_token_length: int = Field(default=3, ge=1)


class ScoredMatch(BaseModel):
    """A knowledge item paired with its score for one search call."""

    item: KnowledgeItem
    score: float


class SearchResult(BaseModel):
    """Ranked matches for a query, or a tag browse listing."""

    query: str
    matches: list[ScoredMatch] = Field(default_factory=list)
    browse_tag: str | None = None

    @property
    def items(self) -> list[KnowledgeItem]:
        """Matched items in rank order."""
        return [m.item for m in self.matches]

    @property
    def is_tag_browse(self) -> bool:
        """True when the result came from a tag lookup rather than scoring."""
        return self.browse_tag is not None
