"""Curriculum and practice test models."""

from enum import StrEnum

from pydantic import BaseModel, Field

from chm_assistant.models.knowledge import Phase


class QuestionType(StrEnum):
    """Question formats a practice test can contain."""

    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    SHORT_ANSWER = "short-answer"
    CLINICAL_CASE = "clinical-case"


class Difficulty(StrEnum):
    """Question difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    DIFFICULT = "difficult"


class DifficultySetting(StrEnum):
    """Difficulty requested for a whole test; mixed cycles through the levels."""

    EASY = "easy"
    MEDIUM = "medium"
    DIFFICULT = "difficult"
    MIXED = "mixed"

    @classmethod
    def _missing_(cls, value: object) -> "DifficultySetting | None":
        if not isinstance(value, str):
            return None
        lowered = value.strip().lower()
        if lowered == "hard":
            return cls.DIFFICULT
        return next((member for member in cls if member.value == lowered), None)

    @property
    def level(self) -> Difficulty | None:
        """Fixed per-question difficulty, or None for mixed."""
        if self is DifficultySetting.MIXED:
            return None
        return Difficulty(self.value)


class CurriculumWeek(BaseModel):
    """Content covered in one week of a curriculum phase."""

    phase: Phase
    week: int = Field(ge=1)
    title: str
    topics: list[str] = Field(min_length=1)
    learning_objectives: list[str] = Field(min_length=1)
    key_terms: list[str] = Field(default_factory=list)
    assessment_focus: list[str] = Field(default_factory=list)


class TestQuestion(BaseModel):
    """A single practice question with its answer and explanation."""

    __test__ = False  # not a pytest test class

    id: str
    question: str
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: list[str] = Field(default_factory=list)
    correct_answer: int | str
    explanation: str
    option_feedback: list[str] | None = None
    difficulty: Difficulty = Difficulty.MEDIUM
    topic: str = ""
    learning_objective: str = ""

    @property
    def has_choices(self) -> bool:
        """True when the answer is an index into options."""
        return (
            bool(self.options)
            and isinstance(self.correct_answer, int)
            and 0 <= self.correct_answer < len(self.options)
        )

    @property
    def answer_letter(self) -> str | None:
        """Letter of the correct option (A for index 0), if any."""
        if not self.has_choices or not isinstance(self.correct_answer, int):
            return None
        return chr(ord("A") + self.correct_answer)


class GeneratedTest(BaseModel):
    """A practice test for one curriculum week, or for one body-system topic."""

    title: str
    phase: Phase = Phase.GENERAL
    week: int | None = None
    topic: str | None = None
    difficulty: DifficultySetting = DifficultySetting.MIXED
    questions: list[TestQuestion]
    source: str = "template"  # "ai" or "template"
    passing_score: int = 70

    @property
    def total_questions(self) -> int:
        """Number of questions in the test."""
        return len(self.questions)

    @property
    def time_allowed(self) -> int:
        """Suggested time in minutes, two per question."""
        return len(self.questions) * 2
