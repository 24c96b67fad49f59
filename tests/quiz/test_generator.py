"""Tests for practice test generation."""

import json

import pytest

from chm_assistant.models.quiz import Difficulty, DifficultySetting, QuestionType
from chm_assistant.quiz.generator import (
    TestGenerator,
    bank_topics,
    build_prompt,
    generic_questions,
    parse_questions,
    resolve_topic,
    template_questions,
    topic_questions,
)
from tests.conftest import FakeLLM, make_week


def _ai_response(questions, title="AI Test") -> str:
    return json.dumps({"title": title, "questions": questions})


_MC = {
    "id": "q1",
    "question": "Which valve sits between the left atrium and left ventricle?",
    "type": "multiple-choice",
    "options": ["Tricuspid", "Mitral", "Aortic", "Pulmonic"],
    "correctAnswer": 1,
    "explanation": "The mitral valve.",
    "difficulty": "easy",
    "topic": "Cardiac Anatomy",
    "learningObjective": "Identify heart valves",
}


# --- parse_questions ---


def test_parse_plain_json():
    questions = parse_questions(_ai_response([_MC]))
    assert len(questions) == 1
    assert questions[0].correct_answer == 1
    assert questions[0].learning_objective == "Identify heart valves"
    assert questions[0].answer_letter == "B"


def test_parse_strips_markdown_fence():
    raw = "Here you go:\n```json\n" + _ai_response([_MC]) + "\n```\nGood luck!"
    assert [q.id for q in parse_questions(raw)] == ["q1"]


def test_parse_extracts_object_from_prose():
    raw = "Sure! " + _ai_response([_MC]) + " Let me know if you need more."
    assert len(parse_questions(raw)) == 1


def test_parse_malformed_json():
    assert parse_questions('{"questions": [ {"id": ') == []


def test_parse_no_json():
    assert parse_questions("I can't help with that.") == []


def test_parse_questions_not_a_list():
    assert parse_questions('{"questions": "none"}') == []


def test_parse_drops_invalid_questions():
    bad_index = {**_MC, "id": "q2", "correctAnswer": 9}
    missing_explanation = {k: v for k, v in _MC.items() if k != "explanation"}
    unknown_type = {**_MC, "id": "q4", "type": "essay"}
    short = {
        "id": "q5",
        "question": "Define preload.",
        "type": "short-answer",
        "correctAnswer": "End-diastolic ventricular stretch",
        "explanation": "Preload reflects EDV.",
    }
    raw = _ai_response([_MC, bad_index, missing_explanation, unknown_type, short, "junk"])
    assert [q.id for q in parse_questions(raw)] == ["q1", "q5"]


def test_parse_maps_hard_and_missing_id():
    question = {k: v for k, v in _MC.items() if k != "id"}
    question["difficulty"] = "hard"
    parsed = parse_questions(_ai_response([question]))
    assert parsed[0].id == "q1"
    assert parsed[0].difficulty is Difficulty.DIFFICULT


# --- templates ---


def test_bank_topics_from_week_wording():
    week = make_week(title="Cardiovascular System", topics=["Lung volumes", "Cardiac anatomy"])
    assert bank_topics(week) == ["cardiovascular", "respiratory"]


def test_bank_topics_none_for_unrelated_week():
    week = make_week(title="Professional Identity", topics=["Ethics"], key_terms=[])
    assert bank_topics(week) == []


def test_template_uses_bank_easiest_first(question_bank):
    week = make_week(title="Renal System", topics=["Nephron physiology"])
    questions = template_questions(week, 3, question_bank)
    assert [q.id for q in questions] == ["renal-easy-1", "renal-med-1", "renal-hard-1"]


def test_template_pads_with_generic_questions(question_bank):
    week = make_week(title="Renal System", topics=["Nephron physiology"])
    questions = template_questions(week, 5, question_bank)
    assert len(questions) == 5
    assert [q.type for q in questions[3:]] == [QuestionType.SHORT_ANSWER] * 2
    assert questions[3].id == "m1-w1-generic-4"


def test_template_generic_for_unknown_topic(question_bank):
    week = make_week(title="Professional Identity", topics=["Ethics", "Communication"])
    questions = template_questions(week, 3, question_bank)
    assert all(q.type is QuestionType.SHORT_ANSWER for q in questions)
    assert questions[0].topic == "Ethics"
    assert questions[1].topic == "Communication"
    assert questions[2].topic == "Ethics"


def test_template_is_deterministic(question_bank):
    week = make_week()
    first = template_questions(week, 5, question_bank)
    second = template_questions(week, 5, question_bank)
    assert first == second


def test_template_zero_count(question_bank):
    assert template_questions(make_week(), 0, question_bank) == []


def test_template_puts_requested_difficulty_first(question_bank):
    week = make_week(title="Renal System", topics=["Nephron physiology"])
    questions = template_questions(week, 3, question_bank, DifficultySetting.DIFFICULT)
    assert [q.id for q in questions] == ["renal-hard-1", "renal-easy-1", "renal-med-1"]


def test_template_generic_questions_use_fixed_difficulty(question_bank):
    week = make_week(title="Professional Identity", topics=["Ethics"])
    questions = template_questions(week, 3, question_bank, DifficultySetting.EASY)
    assert [q.difficulty for q in questions] == [Difficulty.EASY] * 3


def test_template_focus_adds_bank_topic(question_bank):
    week = make_week(title="Professional Identity", topics=["Ethics"])
    questions = template_questions(week, 2, question_bank, focus=["kidney function"])
    assert [q.id for q in questions] == ["renal-easy-1", "renal-med-1"]


def test_mixed_generic_difficulty_cycles():
    questions = generic_questions(make_week(), 4)
    assert [q.difficulty for q in questions] == [
        Difficulty.EASY,
        Difficulty.MEDIUM,
        Difficulty.DIFFICULT,
        Difficulty.EASY,
    ]


def test_generic_question_text():
    week = make_week(topics=["ECG basics"], learning_objectives=["Interpret basic ECG rhythms"])
    question = generic_questions(week, 1)[0]
    assert question.question == (
        "Based on ECG basics, explain the key concepts related to interpret basic ECG rhythms."
    )
    assert question.answer_letter is None


def test_build_prompt_mentions_week():
    week = make_week(key_terms=["Preload"])
    prompt = build_prompt(week, 4)
    assert "4 questions" in prompt
    assert "Cardiovascular System" in prompt
    assert "Key Terms: Preload" in prompt
    assert "Difficulty: mixed" in prompt
    assert "Special Focus" not in prompt


def test_build_prompt_difficulty_and_focus():
    prompt = build_prompt(make_week(), 4, DifficultySetting.DIFFICULT, ["ECG interpretation"])
    assert "Difficulty: difficult" in prompt
    assert "Special Focus: ECG interpretation" in prompt


# --- topic tests ---


@pytest.mark.parametrize(
    ("text", "key"),
    [("Heart", "cardiovascular"), ("kidney disease", "renal"), ("ethics", None)],
)
def test_resolve_topic(text, key):
    assert resolve_topic(text) == key


def test_topic_questions_fill_from_other_levels(question_bank):
    questions = topic_questions("renal", 3, question_bank, DifficultySetting.MEDIUM)
    assert [q.id for q in questions] == ["renal-med-1", "renal-easy-1", "renal-hard-1"]


def test_generate_topic_test(template_generator):
    test = template_generator.generate_topic("cardio", "hard", 2)
    assert test is not None
    assert test.title == "Cardiovascular Assessment (Difficult Level)"
    assert test.topic == "cardiovascular"
    assert test.week is None
    assert [q.id for q in test.questions] == ["cv-hard-1", "cv-easy-1"]


def test_generate_topic_unknown_returns_none(template_generator):
    assert template_generator.generate_topic("dermatology") is None


# --- TestGenerator ---


@pytest.mark.asyncio
async def test_generate_uses_model_questions(catalog, question_bank):
    llm = FakeLLM(response=_ai_response([_MC, {**_MC, "id": "q2"}]))
    generator = TestGenerator(catalog, question_bank, llm)
    test = await generator.generate("M1", 2, 5)
    assert test.source == "ai"
    assert [q.id for q in test.questions] == ["q1", "q2"]
    assert llm.last_max_tokens == 3000
    assert "Cardiovascular" in llm.last_message


@pytest.mark.asyncio
async def test_generate_truncates_model_questions(catalog, question_bank):
    many = [{**_MC, "id": f"q{i}"} for i in range(1, 8)]
    generator = TestGenerator(catalog, question_bank, FakeLLM(response=_ai_response(many)))
    test = await generator.generate("M1", 2, 3)
    assert len(test.questions) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "llm",
    [
        None,
        FakeLLM(response=None, available=False),
        FakeLLM(response="not json at all"),
        FakeLLM(response='{"questions": []}'),
        FakeLLM(error=TimeoutError()),
    ],
)
async def test_generate_falls_back_to_template(catalog, question_bank, llm):
    generator = TestGenerator(catalog, question_bank, llm)
    test = await generator.generate("M1", 3, 5)
    assert test.source == "template"
    assert len(test.questions) == 5
    assert test.title == "Respiratory System - Assessment"
    assert test.time_allowed == 10


@pytest.mark.asyncio
async def test_generate_unknown_week_raises(template_generator):
    with pytest.raises(ValueError):
        await template_generator.generate("M1", 99)


@pytest.mark.asyncio
async def test_generate_passes_difficulty_to_model(catalog, question_bank):
    llm = FakeLLM(response=_ai_response([_MC]))
    generator = TestGenerator(catalog, question_bank, llm)
    test = await generator.generate("M1", 2, 1, difficulty="hard", focus=["valves", " "])
    assert test.difficulty is DifficultySetting.DIFFICULT
    assert "Difficulty: difficult" in llm.last_message
    assert "Special Focus: valves" in llm.last_message


@pytest.mark.asyncio
async def test_generate_rejects_unknown_difficulty(template_generator):
    with pytest.raises(ValueError):
        await template_generator.generate("M1", 3, difficulty="impossible")
