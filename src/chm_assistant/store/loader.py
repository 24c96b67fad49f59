"""Load the knowledge, curriculum and question-bank tables from JSON files."""

import logging
from pathlib import Path

from pydantic import TypeAdapter

from chm_assistant.models.knowledge import KnowledgeItem
from chm_assistant.models.quiz import CurriculumWeek, TestQuestion

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_KNOWLEDGE_PATH = _DATA_DIR / "knowledge.json"
DEFAULT_CURRICULUM_PATH = _DATA_DIR / "curriculum.json"
DEFAULT_QUESTION_BANK_PATH = _DATA_DIR / "question_bank.json"

_KNOWLEDGE_ADAPTER = TypeAdapter(list[KnowledgeItem])
_CURRICULUM_ADAPTER = TypeAdapter(list[CurriculumWeek])
_QUESTION_BANK_ADAPTER = TypeAdapter(dict[str, list[TestQuestion]])


def load_knowledge(path: Path) -> list[KnowledgeItem]:
    """Parse a JSON array of knowledge items."""
    items = _KNOWLEDGE_ADAPTER.validate_json(path.read_bytes())
    logger.info("Loaded %d knowledge items from %s", len(items), path)
    return items


def load_curriculum(path: Path) -> list[CurriculumWeek]:
    """Parse a JSON array of curriculum weeks."""
    weeks = _CURRICULUM_ADAPTER.validate_json(path.read_bytes())
    logger.info("Loaded %d curriculum weeks from %s", len(weeks), path)
    return weeks


def load_question_bank(path: Path) -> dict[str, list[TestQuestion]]:
    """Parse a JSON object mapping a body-system key to its template questions."""
    bank = _QUESTION_BANK_ADAPTER.validate_json(path.read_bytes())
    logger.info("Loaded question bank with %d topics from %s", len(bank), path)
    return bank


def load_default_knowledge() -> list[KnowledgeItem]:
    """Knowledge table shipped with the package."""
    return load_knowledge(DEFAULT_KNOWLEDGE_PATH)


def load_default_curriculum() -> list[CurriculumWeek]:
    """Curriculum table shipped with the package."""
    return load_curriculum(DEFAULT_CURRICULUM_PATH)


def load_default_question_bank() -> dict[str, list[TestQuestion]]:
    """Template question bank shipped with the package."""
    return load_question_bank(DEFAULT_QUESTION_BANK_PATH)
