"""Practice test generation: model-written questions with a template fallback."""

import json
import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from chm_assistant.llm.provider import LLMProvider
from chm_assistant.models.knowledge import Phase
from chm_assistant.models.quiz import (
    CurriculumWeek,
    Difficulty,
    DifficultySetting,
    GeneratedTest,
    QuestionType,
    TestQuestion,
)
from chm_assistant.quiz.curriculum import CurriculumCatalog

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_WORD_RE = re.compile(r"[a-z0-9]+")

_MAX_TOKENS = 3000

# Keyword in a week's title, topics or key terms -> question bank key
TOPIC_ALIASES: dict[str, str] = {
    "cardio": "cardiovascular",
    "cardiovascular": "cardiovascular",
    "cardiac": "cardiovascular",
    "heart": "cardiovascular",
    "respiratory": "respiratory",
    "pulmonary": "respiratory",
    "lung": "respiratory",
    "renal": "renal",
    "kidney": "renal",
    "nephrology": "renal",
    "nephron": "renal",
    "endocrine": "endocrine",
    "hormone": "endocrine",
    "diabetes": "endocrine",
    "thyroid": "endocrine",
    "gastrointestinal": "gastrointestinal",
    "gi": "gastrointestinal",
    "digestive": "gastrointestinal",
    "liver": "gastrointestinal",
    "nervous": "nervous",
    "neuro": "nervous",
    "neurology": "nervous",
    "neurological": "nervous",
    "brain": "nervous",
    "cns": "nervous",
    "stroke": "nervous",
    "immunology": "immunology",
    "immune": "immunology",
    "antibody": "immunology",
    "microbiology": "microbiology",
    "micro": "microbiology",
    "bacteria": "microbiology",
    "virus": "microbiology",
    "viruses": "microbiology",
    "infectious": "microbiology",
    "biochemistry": "biochemistry",
    "metabolism": "biochemistry",
    "enzyme": "biochemistry",
    "pharmacology": "pharmacology",
    "drug": "pharmacology",
    "medication": "pharmacology",
    "antibiotic": "pharmacology",
}

_DIFFICULTY_ORDER = {Difficulty.EASY: 0, Difficulty.MEDIUM: 1, Difficulty.DIFFICULT: 2}

_CAMEL_KEYS = {
    "correctAnswer": "correct_answer",
    "optionFeedback": "option_feedback",
    "learningObjective": "learning_objective",
}

_GENERATE_SYSTEM = """\
You are an expert medical educator creating high-quality assessment questions \
for medical students. Create questions that test both knowledge and clinical \
application.

Return ONLY a JSON object with this structure:
{
  "title": "Assessment Title",
  "questions": [
    {
      "id": "q1",
      "question": "Question text",
      "type": "multiple-choice",
      "options": ["A", "B", "C", "D"],
      "correctAnswer": 0,
      "explanation": "Detailed explanation",
      "optionFeedback": ["Why A is right or wrong", "..."],
      "difficulty": "medium",
      "topic": "Specific topic",
      "learningObjective": "What this tests"
    }
  ]
}

Rules:
- type is one of: multiple-choice, true-false, short-answer, clinical-case.
- For multiple-choice and clinical-case give 4 options; for true-false give \
["True", "False"]. correctAnswer is the 0-based index of the right option.
- For short-answer omit options and give correctAnswer as text.
- difficulty is one of: easy, medium, difficult.\
"""


def build_prompt(
    week: CurriculumWeek,
    num_questions: int,
    difficulty: DifficultySetting = DifficultySetting.MIXED,
    focus: Sequence[str] = (),
) -> str:
    """User prompt describing the week the questions should cover."""
    lines = [
        f"Create a medical education assessment with {num_questions} questions for:",
        "",
        f"Phase: {week.phase.value}, week {week.week}",
        f"Course: {week.title}",
        f"Topics: {', '.join(week.topics)}",
        f"Learning Objectives: {'; '.join(week.learning_objectives)}",
    ]
    if week.key_terms:
        lines.append(f"Key Terms: {', '.join(week.key_terms)}")
    if week.assessment_focus:
        lines.append(f"Assessment Focus: {', '.join(week.assessment_focus)}")
    lines.append(f"Difficulty: {difficulty.value}")
    if focus:
        lines.append(f"Special Focus: {', '.join(focus)}")
    lines += [
        "",
        f"Create exactly {num_questions} questions mixing multiple choice, "
        "true/false and short answer.",
    ]
    return "\n".join(lines)


def _normalize_question(raw: Mapping[str, Any], index: int) -> dict[str, Any]:
    data = {_CAMEL_KEYS.get(key, key): value for key, value in raw.items()}
    data.setdefault("id", f"q{index}")
    data["id"] = str(data["id"])
    if data.get("difficulty") == "hard":
        data["difficulty"] = Difficulty.DIFFICULT.value
    return data


def parse_questions(raw: str) -> list[TestQuestion]:
    """Parse a model response into validated questions.

    Markdown fences are stripped and the outermost JSON object is used.
    Questions that fail validation, or whose answer index points outside
    their options, are dropped.
    """
    fence_match = _FENCE_RE.search(raw)
    if fence_match:
        raw = fence_match.group(1)

    object_match = _JSON_OBJECT_RE.search(raw)
    if not object_match:
        logger.warning("No JSON object found in test generation response")
        return []

    try:
        data = json.loads(object_match.group(0))
    except json.JSONDecodeError:
        logger.warning("Malformed JSON in test generation response")
        return []

    items = data.get("questions") if isinstance(data, dict) else None
    if not isinstance(items, list):
        return []

    questions: list[TestQuestion] = []
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            continue
        try:
            question = TestQuestion.model_validate(_normalize_question(item, index))
        except ValidationError:
            logger.debug("Dropping invalid generated question %d", index)
            continue
        if question.type is not QuestionType.SHORT_ANSWER and not question.has_choices:
            logger.debug("Dropping generated question %d with no valid answer index", index)
            continue
        questions.append(question)
    return questions


def resolve_topic(text: str) -> str | None:
    """Question bank key for the first topic keyword in text, if any."""
    for word in _WORD_RE.findall(text.lower()):
        key = TOPIC_ALIASES.get(word)
        if key is not None:
            return key
    return None


def bank_topics(week: CurriculumWeek, focus: Sequence[str] = ()) -> list[str]:
    """Question bank keys suggested by the focus and the week's wording, in first-seen order."""
    text = " ".join([*focus, week.title, *week.topics, *week.key_terms]).lower()
    keys: list[str] = []
    for word in _WORD_RE.findall(text):
        key = TOPIC_ALIASES.get(word)
        if key is not None and key not in keys:
            keys.append(key)
    return keys


def order_by_difficulty(
    questions: Sequence[TestQuestion], difficulty: DifficultySetting
) -> list[TestQuestion]:
    """Requested level first, then the rest easiest first; mixed is simply easiest first."""
    level = difficulty.level
    if level is None:
        return sorted(questions, key=lambda q: _DIFFICULTY_ORDER[q.difficulty])
    return sorted(
        questions,
        key=lambda q: (q.difficulty is not level, _DIFFICULTY_ORDER[q.difficulty]),
    )


def generic_questions(
    week: CurriculumWeek,
    count: int,
    start: int = 1,
    difficulty: DifficultySetting = DifficultySetting.MIXED,
) -> list[TestQuestion]:
    """Short-answer prompts built from the week's topics and objectives."""
    questions = []
    for i in range(count):
        n = start + i
        topic = week.topics[(n - 1) % len(week.topics)]
        objective = week.learning_objectives[(n - 1) % len(week.learning_objectives)]
        questions.append(
            TestQuestion(
                id=f"{week.phase.value.lower()}-w{week.week}-generic-{n}",
                question=(
                    f"Based on {topic}, explain the key concepts related to "
                    f"{objective[:1].lower() + objective[1:]}."
                ),
                type=QuestionType.SHORT_ANSWER,
                correct_answer=(
                    f"Key concepts for {topic} include the fundamental principles "
                    f"covered in {week.title}."
                ),
                explanation=(
                    f"This question tests understanding of {topic} as covered in the "
                    "learning objectives."
                ),
                difficulty=difficulty.level or list(Difficulty)[(n - 1) % len(Difficulty)],
                topic=topic,
                learning_objective=objective,
            )
        )
    return questions


def template_questions(
    week: CurriculumWeek,
    count: int,
    question_bank: Mapping[str, Sequence[TestQuestion]],
    difficulty: DifficultySetting = DifficultySetting.MIXED,
    focus: Sequence[str] = (),
) -> list[TestQuestion]:
    """Deterministic question set for a week.

    Bank questions for every matching topic come first. Within a topic the
    requested difficulty leads, and mixed lists the questions easiest first.
    Generic short-answer prompts fill any remaining slots.
    """
    if count <= 0:
        return []
    selected: list[TestQuestion] = []
    for key in bank_topics(week, focus):
        selected.extend(order_by_difficulty(question_bank.get(key, ()), difficulty))
    selected = selected[:count]
    if len(selected) < count:
        selected += generic_questions(
            week, count - len(selected), start=len(selected) + 1, difficulty=difficulty
        )
    return selected


def topic_questions(
    topic_key: str,
    count: int,
    question_bank: Mapping[str, Sequence[TestQuestion]],
    difficulty: DifficultySetting = DifficultySetting.MEDIUM,
) -> list[TestQuestion]:
    """Bank questions for one topic, requested difficulty first, topped up from the others."""
    if count <= 0:
        return []
    return order_by_difficulty(question_bank.get(topic_key, ()), difficulty)[:count]


class TestGenerator:
    """Builds practice tests for a curriculum week or a body-system topic."""

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        catalog: CurriculumCatalog,
        question_bank: Mapping[str, Sequence[TestQuestion]],
        llm: LLMProvider | None = None,
    ) -> None:
        """Initialize with the curriculum table, template bank and an optional model."""
        self._catalog = catalog
        self._bank = question_bank
        self._llm = llm

    async def generate(
        self,
        phase: Phase | str,
        week: int,
        num_questions: int = 5,
        *,
        difficulty: DifficultySetting | str = DifficultySetting.MIXED,
        focus: Sequence[str] = (),
    ) -> GeneratedTest:
        """Generate a test, falling back to templates when the model can't help.

        Raises ValueError when the catalog has no such week or the difficulty
        is not recognised.
        """
        entry = self._catalog.get_week(phase, week)
        if entry is None:
            raise ValueError(f"No curriculum content for {phase} week {week}")
        setting = DifficultySetting(difficulty)
        focus = [f.strip() for f in focus if f.strip()]

        questions = await self._generate_with_llm(entry, num_questions, setting, focus)
        source = "ai"
        if not questions:
            questions = template_questions(entry, num_questions, self._bank, setting, focus)
            source = "template"
        logger.info(
            "Generated %d %s %s questions for %s week %d",
            len(questions), source, setting.value, entry.phase.value, entry.week,
        )
        return GeneratedTest(
            title=f"{entry.title} - Assessment",
            phase=entry.phase,
            week=entry.week,
            difficulty=setting,
            questions=questions,
            source=source,
        )

    def generate_topic(
        self,
        topic: str,
        difficulty: DifficultySetting | str = DifficultySetting.MEDIUM,
        num_questions: int = 5,
    ) -> GeneratedTest | None:
        """Test drawn from the question bank for one body system, without a curriculum week.

        Returns None when the topic is not recognised or its bank is empty.
        """
        setting = DifficultySetting(difficulty)
        key = resolve_topic(topic)
        if key is None or not self._bank.get(key):
            logger.info("No question bank for topic %r", topic)
            return None
        questions = topic_questions(key, num_questions, self._bank, setting)
        return GeneratedTest(
            title=f"{key.capitalize()} Assessment ({setting.value.capitalize()} Level)",
            topic=key,
            difficulty=setting,
            questions=questions,
            source="template",
        )

    async def _generate_with_llm(
        self,
        week: CurriculumWeek,
        num_questions: int,
        difficulty: DifficultySetting,
        focus: Sequence[str],
    ) -> list[TestQuestion]:
        if self._llm is None or num_questions <= 0:
            return []
        try:
            raw = await self._llm.generate(
                build_prompt(week, num_questions, difficulty, focus),
                system=_GENERATE_SYSTEM,
                max_tokens=_MAX_TOKENS,
            )
        except Exception:
            logger.warning("Test generation call failed", exc_info=True)
            return []
        if raw is None:
            return []
        return parse_questions(raw)[:num_questions]
