"""Tests for intent classification."""

import pytest

from chm_assistant.chat.intents import (
    Intent,
    classify_intent,
    extract_difficulty,
    extract_phase,
    extract_week,
    is_follow_up,
)
from chm_assistant.models.conversation import ConversationTurn
from chm_assistant.models.knowledge import Phase
from chm_assistant.models.quiz import DifficultySetting

HISTORY = [
    ConversationTurn(role="user", content="Tell me about the cardiac cycle"),
    ConversationTurn(role="assistant", content="The cardiac cycle has systole and diastole."),
]


@pytest.mark.parametrize(
    "message",
    [
        "create a test for M1 week 3",
        "Quiz me on renal physiology",
        "I want some practice questions",
        "Can I get an assessment for MCE?",
        "make an EXAM",
    ],
)
def test_test_request(message):
    assert classify_intent(message) is Intent.TEST_REQUEST


@pytest.mark.parametrize(
    "message",
    ["hello", "  Hi there!", "hey", "Good morning", "help", "What can you do?", "who are you"],
)
def test_greeting(message):
    assert classify_intent(message) is Intent.GREETING


def test_greeting_must_be_at_start():
    assert classify_intent("tell me about research, hello") is Intent.GENERAL_QUERY


def test_test_request_wins_over_greeting():
    assert classify_intent("hi, can you quiz me?") is Intent.TEST_REQUEST


@pytest.mark.parametrize("message", ["harder", "explain more", "why?", "what about renal?"])
def test_follow_up_with_history(message):
    assert classify_intent(message, HISTORY) is Intent.FOLLOW_UP


def test_follow_up_requires_history():
    assert classify_intent("explain more") is Intent.GENERAL_QUERY


def test_follow_up_requires_prior_user_turn():
    history = [ConversationTurn(role="assistant", content="Welcome!")]
    assert not is_follow_up("more please", history)


def test_long_message_is_not_follow_up():
    message = "can you explain more about the learning societies and how they work"
    assert not is_follow_up(message, HISTORY)
    assert classify_intent(message, HISTORY) is Intent.GENERAL_QUERY


@pytest.mark.parametrize("message", ["", "   ", "🩺🫀", "x" * 1000])
def test_odd_input_is_general_query(message):
    assert classify_intent(message) is Intent.GENERAL_QUERY


# --- extract_phase / extract_week ---


@pytest.mark.parametrize(
    ("message", "phase"),
    [
        ("test for M1 week 2", Phase.M1),
        ("mce quiz", Phase.MCE),
        ("LCE practice", Phase.LCE),
        ("HM1 elective", None),
        ("no phase here", None),
    ],
)
def test_extract_phase(message, phase):
    assert extract_phase(message) == phase


@pytest.mark.parametrize(
    ("message", "week"),
    [
        ("M1 week 3", 3),
        ("wk 12", 12),
        ("week #4", 4),
        ("Week3", 3),
        ("weekly review", None),
        ("M1", None),
    ],
)
def test_extract_week(message, week):
    assert extract_week(message) == week


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("create a HARD test for M1 week 2", DifficultySetting.DIFFICULT),
        ("easy quiz on renal", DifficultySetting.EASY),
        ("medium difficulty please", DifficultySetting.MEDIUM),
        ("create a test for M1 week 2", DifficultySetting.MIXED),
    ],
)
def test_extract_difficulty(message, expected):
    assert extract_difficulty(message) is expected
