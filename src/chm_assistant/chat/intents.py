"""Classify an inbound chat message into an intent."""

import logging
import re
from collections.abc import Sequence
from enum import StrEnum

from chm_assistant.models.conversation import ConversationTurn, Role
from chm_assistant.models.knowledge import Phase
from chm_assistant.models.quiz import DifficultySetting

logger = logging.getLogger(__name__)

FOLLOW_UP_MAX_WORDS = 6


class Intent(StrEnum):
    """What an inbound message is asking for."""

    TEST_REQUEST = "test_request"
    GREETING = "greeting"
    FOLLOW_UP = "follow_up"
    GENERAL_QUERY = "general_query"


_TEST_RE = re.compile(r"\b(test|tests|quiz|quizzes|exam|exams|practice|assessment)\b")

# Anchored at the start of the trimmed, lowercased message
_GREETING_PATTERNS = (
    re.compile(r"^(hi|hello|hey|howdy|greetings)\b"),
    re.compile(r"^good (morning|afternoon|evening)\b"),
    re.compile(r"^help\b"),
    re.compile(r"^what can you (do|help)"),
    re.compile(r"^(who|what) are you\b"),
    re.compile(r"^how (do|can) (i|you) use\b"),
)

_PHASE_RE = re.compile(r"\b(M1|MCE|LCE)\b", re.IGNORECASE)
_WEEK_RE = re.compile(r"\b(?:week|wk)\s*#?\s*(\d{1,3})\b", re.IGNORECASE)
_DIFFICULTY_RE = re.compile(r"\b(easy|medium|hard|difficult|mixed)\b", re.IGNORECASE)

_FOLLOW_UP_RE = re.compile(
    r"\b(harder|easier|more|another|again|explain|why|elaborate|continue|what about)\b"
)


def _normalize(message: str) -> str:
    return message.strip().lower()


def is_test_request(message: str) -> bool:
    """True when the message mentions a test, quiz, exam or practice session."""
    return _TEST_RE.search(_normalize(message)) is not None


def is_greeting(message: str) -> bool:
    """True when the message opens with a greeting or a request for help."""
    text = _normalize(message)
    return any(pattern.search(text) for pattern in _GREETING_PATTERNS)


def extract_phase(message: str) -> Phase | None:
    """Program phase code named in the message, if any."""
    match = _PHASE_RE.search(message)
    if match is None:
        return None
    return Phase(match.group(1).upper())


def extract_week(message: str) -> int | None:
    """Week number named in the message ("week 3", "wk 3", "week #3"), if any."""
    match = _WEEK_RE.search(message)
    if match is None:
        return None
    return int(match.group(1))


def extract_difficulty(message: str) -> DifficultySetting:
    """Difficulty named in the message ("hard", "easy", ...), mixed when none is."""
    match = _DIFFICULTY_RE.search(message)
    if match is None:
        return DifficultySetting.MIXED
    return DifficultySetting(match.group(1))


def previous_user_turn(history: Sequence[ConversationTurn]) -> ConversationTurn | None:
    """Most recent user turn in history."""
    for turn in reversed(history):
        if turn.role is Role.USER:
            return turn
    return None


def is_follow_up(message: str, history: Sequence[ConversationTurn]) -> bool:
    """Short message like "harder" or "explain more" that leans on the previous turn."""
    text = _normalize(message)
    if not text or len(text.split()) > FOLLOW_UP_MAX_WORDS:
        return False
    if _FOLLOW_UP_RE.search(text) is None:
        return False
    return previous_user_turn(history) is not None


def classify_intent(message: str, history: Sequence[ConversationTurn] = ()) -> Intent:
    """Classify a message. Checks run in a fixed order; the first match wins."""
    if is_test_request(message):
        intent = Intent.TEST_REQUEST
    elif is_greeting(message):
        intent = Intent.GREETING
    elif is_follow_up(message, history):
        intent = Intent.FOLLOW_UP
    else:
        intent = Intent.GENERAL_QUERY
    logger.debug("Classified %r as %s", message[:80], intent)
    return intent
