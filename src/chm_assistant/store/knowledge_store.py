"""Read-only access to the curriculum knowledge table."""

import logging
from collections.abc import Iterable, Sequence

from chm_assistant.models.knowledge import KnowledgeItem, Phase

logger = logging.getLogger(__name__)


def _require_str(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string, got {type(value).__name__}")
    return value


class KnowledgeStore:
    """Immutable, ordered collection of knowledge items."""

    def __init__(self, items: Iterable[KnowledgeItem]):
        """Initialize with the full item list; order is preserved."""
        self._items: tuple[KnowledgeItem, ...] = tuple(items)
        ids = [item.id for item in self._items]
        if len(ids) != len(set(ids)):
            raise ValueError("Knowledge item ids must be unique")
        self._by_id = {item.id: item for item in self._items}
        logger.debug("Knowledge store loaded with %d items", len(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def all(self) -> Sequence[KnowledgeItem]:
        """All items in load order."""
        return self._items

    def get(self, item_id: str) -> KnowledgeItem | None:
        """Look up an item by id."""
        return self._by_id.get(item_id)

    def by_category(self, substr: str) -> list[KnowledgeItem]:
        """Items whose category or subcategory contains substr, highest priority first.

        An empty substring matches nothing.
        """
        needle = _require_str(substr, "substr").strip().lower()
        if not needle:
            return []
        matches = [
            item
            for item in self._items
            if needle in item.category.lower()
            or (item.subcategory is not None and needle in item.subcategory.lower())
        ]
        return sorted(matches, key=lambda item: item.priority, reverse=True)

    def by_tag(self, tag: str) -> list[KnowledgeItem]:
        """Items with a tag containing tag, highest priority first.

        An empty tag matches nothing.
        """
        needle = _require_str(tag, "tag").strip().lower()
        if not needle:
            return []
        matches = [
            item for item in self._items if any(needle in t.lower() for t in item.tags)
        ]
        return sorted(matches, key=lambda item: item.priority, reverse=True)

    def by_phase(self, phase: Phase | str) -> list[KnowledgeItem]:
        """Items restricted to a curriculum phase, highest priority first."""
        wanted = Phase(phase)
        matches = [item for item in self._items if item.phase == wanted]
        return sorted(matches, key=lambda item: item.priority, reverse=True)

    def categories(self) -> list[str]:
        """Distinct categories in first-seen order."""
        return list(dict.fromkeys(item.category for item in self._items if item.category))

    def all_tags(self) -> list[str]:
        """Distinct tags in first-seen order."""
        return list(dict.fromkeys(tag for item in self._items for tag in item.tags))
