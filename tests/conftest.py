"""Shared test fixtures."""

from datetime import date

import pytest

from chm_assistant.models.knowledge import KnowledgeItem
from chm_assistant.models.quiz import CurriculumWeek
from chm_assistant.quiz.curriculum import CurriculumCatalog
from chm_assistant.quiz.generator import TestGenerator
from chm_assistant.search.matcher import QueryMatcher
from chm_assistant.store.knowledge_store import KnowledgeStore
from chm_assistant.store.loader import (
    load_default_curriculum,
    load_default_knowledge,
    load_default_question_bank,
)

# Fixed "today" so the recency bonus is reproducible
TODAY = date(2025, 6, 15)


def make_item(**kwargs) -> KnowledgeItem:
    """Knowledge item with sensible defaults; last_updated is well outside the recency window."""
    defaults = {
        "id": "item-1",
        "title": "Untitled",
        "content": "",
        "category": "General",
        "priority": 5,
        "last_updated": date(2024, 1, 1),
    }
    defaults.update(kwargs)
    return KnowledgeItem(**defaults)


def make_week(**kwargs) -> CurriculumWeek:
    defaults = {
        "phase": "M1",
        "week": 1,
        "title": "Cardiovascular System",
        "topics": ["Cardiac anatomy", "ECG basics"],
        "learning_objectives": ["Describe cardiac anatomy", "Interpret basic ECG rhythms"],
    }
    defaults.update(kwargs)
    return CurriculumWeek(**defaults)


class FakeLLM:
    """Controllable fake LLM for testing."""

    def __init__(
        self,
        response: str | None = "Model reply",
        available: bool = True,
        error: Exception | None = None,
    ):
        self.response = response
        self._available = available
        self.error = error
        self.last_message: str | None = None
        self.last_system: str | None = None
        self.last_history: list | None = None
        self.last_max_tokens: int | None = None
        self.generate_count = 0

    async def is_available(self) -> bool:
        return self._available

    async def generate(
        self,
        message: str,
        *,
        system: str | None = None,
        history=None,
        max_tokens: int = 800,
        temperature: float = 0.7,
    ) -> str | None:
        self.last_message = message
        self.last_system = system
        self.last_history = list(history) if history is not None else None
        self.last_max_tokens = max_tokens
        self.generate_count += 1
        if self.error is not None:
            raise self.error
        if not self._available:
            return None
        return self.response

    async def close(self) -> None:
        pass


@pytest.fixture
def fake_llm():
    """Controllable fake LLM client."""
    return FakeLLM()


@pytest.fixture
def failing_llm():
    """LLM whose every call fails."""
    return FakeLLM(response=None, available=False)


@pytest.fixture
def default_store():
    """Knowledge store built from the packaged table."""
    return KnowledgeStore(load_default_knowledge())


@pytest.fixture
def default_matcher(default_store):
    return QueryMatcher(default_store)


@pytest.fixture
def catalog():
    """Curriculum catalog built from the packaged table."""
    return CurriculumCatalog(load_default_curriculum())


@pytest.fixture
def question_bank():
    return load_default_question_bank()


@pytest.fixture
def template_generator(catalog, question_bank):
    """Test generator with no model, so it always uses templates."""
    return TestGenerator(catalog, question_bank)
