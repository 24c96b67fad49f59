"""Knowledge item models."""

from datetime import date
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Phase(StrEnum):
    """Curriculum stage an item applies to."""

    M1 = "M1"
    MCE = "MCE"
    LCE = "LCE"
    GENERAL = "General"


class ItemType(StrEnum):
    """Kind of portal content an item describes."""

    PAGE = "page"
    RESOURCE = "resource"
    FORM = "form"
    GUIDE = "guide"


def build_searchable_text(
    title: str,
    content: str,
    category: str,
    subcategory: str | None = None,
    phase: str | None = None,
    tags: tuple[str, ...] | list[str] = (),
    synonyms: tuple[str, ...] | list[str] = (),
) -> str:
    """Lowercase full-text blob matched by the query matcher."""
    parts = [title, category, subcategory or "", phase or "", *tags, *synonyms, content]
    return " ".join(" ".join(p.split()) for p in parts if p).lower()


class KnowledgeItem(BaseModel):
    """A curated, immutable topic record from the curriculum portal."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str = ""
    category: str = ""
    subcategory: str | None = None
    phase: Phase = Phase.GENERAL
    tags: tuple[str, ...] = ()
    synonyms: tuple[str, ...] = ()
    priority: int = Field(default=5, ge=0)
    last_updated: date
    url: str | None = None
    item_type: ItemType = ItemType.PAGE
    searchable_text: str = ""

    @model_validator(mode="before")
    @classmethod
    def _derive_searchable_text(cls, data: Any) -> Any:
        """Fill searchable_text from the other fields unless supplied."""
        if not isinstance(data, dict):
            return data
        supplied = data.get("searchable_text")
        if supplied:
            return {**data, "searchable_text": supplied.lower()}
        phase = data.get("phase")
        return {
            **data,
            "searchable_text": build_searchable_text(
                title=data.get("title", ""),
                content=data.get("content", ""),
                category=data.get("category", ""),
                subcategory=data.get("subcategory"),
                phase=str(phase) if phase is not None else None,
                tags=tuple(data.get("tags") or ()),
                synonyms=tuple(data.get("synonyms") or ()),
            ),
        }
