"""Route a chat message through the fallback tiers to a reply."""

import logging
from collections.abc import Sequence
from datetime import date, datetime

from chm_assistant.chat.fallbacks import GREETING_MESSAGE, canned_answer
from chm_assistant.chat.intents import (
    Intent,
    classify_intent,
    extract_difficulty,
    extract_phase,
    extract_week,
    previous_user_turn,
)
from chm_assistant.llm.provider import LLMProvider
from chm_assistant.models.conversation import ConversationTurn, Role
from chm_assistant.models.knowledge import Phase
from chm_assistant.models.search import SearchResult
from chm_assistant.quiz.curriculum import CurriculumCatalog
from chm_assistant.quiz.generator import TestGenerator
from chm_assistant.search.lookup import search_knowledge
from chm_assistant.search.matcher import QueryMatcher, tokenize
from chm_assistant.store.knowledge_store import KnowledgeStore
from chm_assistant.tools.formatters import assemble_response, format_test

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are the Just In Time Medicine AI assistant for the College of Human Medicine \
at Michigan State University. You help medical students navigate their Shared \
Discovery Curriculum, learning societies, and academic resources.

Learning Societies:
- Jane Addams: social justice and community health advocacy
- John Dewey: problem-based learning and critical thinking
- Abraham Flexner: scientific rigor and research
- William Osler: patient care and clinical excellence

Academic Phases:
- M1: foundational sciences with early clinical exposure
- MCE: Middle Clinical Experience, rotations across core specialties
- LCE: Late Clinical Experience, acting internships, electives and residency preparation

Key Resources: Canvas, MyMSU, NBME practice exams, Clinical Skills Center

Always provide helpful, accurate information about CHM curriculum, learning \
opportunities, and student support resources. Be encouraging and supportive \
while maintaining professionalism.\
"""

APOLOGY = "I'm sorry, something went wrong while answering your question. Please try again."
TEST_APOLOGY = (
    "I'm sorry, I couldn't generate a practice test right now. "
    "Please try again in a moment."
)

_MAX_TOKENS = 1000
_TEMPERATURE = 0.7
_CONTEXT_CHARS = 200

# Common words that never make a knowledge title a direct answer
_FILLER_WORDS = frozenset(
    {
        "about", "and", "any", "are", "best", "but", "can", "could", "does", "for",
        "from", "get", "give", "good", "has", "have", "how", "into", "know", "like",
        "more", "need", "not", "our", "should", "show", "some", "tell", "that", "the",
        "their", "there", "this", "tips", "was", "what", "when", "where", "which",
        "who", "why", "with", "would", "you", "your",
    }
)


def error_tag(exc: BaseException) -> str:
    """Short marker naming the failure, appended to apology replies."""
    return f"[error: {type(exc).__name__}]"


def phase_menu(catalog: CurriculumCatalog) -> str:
    """Reply asking which phase a practice test should cover."""
    lines = [
        "I can create a practice test for you. Which phase would you like?",
        "",
    ]
    for phase in catalog.phases():
        weeks = catalog.weeks(phase)
        lines.append(f"• **{phase.value}** ({len(weeks)} weeks available)")
    lines += ["", 'For example: "create a test for M1 week 3".']
    return "\n".join(lines)


def week_menu(catalog: CurriculumCatalog, phase: Phase, requested: int | None = None) -> str:
    """Reply listing the weeks that exist for a phase."""
    weeks = catalog.weeks(phase)
    if not weeks:
        return f"There are no {phase.value} weeks with practice tests yet."
    if requested is None:
        lines = [f"Which {phase.value} week would you like a practice test for?", ""]
    else:
        lines = [f"{phase.value} week {requested} isn't in the curriculum. Available weeks:", ""]
    for week in weeks:
        lines.append(f"• **Week {week.week}**: {week.title}")
    lines += ["", f'For example: "create a test for {phase.value} week {weeks[0].week}".']
    return "\n".join(lines)


def rewrite_follow_up(message: str, history: Sequence[ConversationTurn]) -> str:
    """Spell out the earlier topic so a terse follow-up stands on its own."""
    previous = previous_user_turn(history)
    if previous is None:
        return message
    reply = next(
        (turn.content for turn in reversed(history) if turn.role is Role.ASSISTANT), ""
    )
    parts = [f'The student previously asked: "{previous.content}".']
    if reply:
        parts.append(f'You answered starting with: "{reply[:_CONTEXT_CHARS]}".')
    parts.append(f'Now they say: "{message}". Continue on the same topic accordingly.')
    return " ".join(parts)


class ChatOrchestrator:
    """Answers chat messages, degrading to deterministic text when anything fails."""

    def __init__(
        self,
        store: KnowledgeStore,
        matcher: QueryMatcher,
        catalog: CurriculumCatalog,
        generator: TestGenerator,
        llm: LLMProvider | None = None,
        *,
        search_limit: int = 8,
        history_window: int = 6,
        test_questions: int = 5,
    ) -> None:
        """Initialize with injected tables and an optional model provider."""
        self._store = store
        self._matcher = matcher
        self._catalog = catalog
        self._generator = generator
        self._llm = llm
        self._search_limit = search_limit
        self._history_window = history_window
        self._test_questions = test_questions

    async def answer(
        self,
        message: str,
        history: Sequence[ConversationTurn] = (),
        now: datetime | date | None = None,
    ) -> str:
        """Reply to a message. Never raises and never returns an empty string."""
        try:
            window = list(history)[-self._history_window :] if self._history_window > 0 else []
            reply = await self._dispatch(message, window, now)
        except Exception as exc:
            logger.exception("Unhandled error answering %r", message[:80])
            return f"{APOLOGY} {error_tag(exc)}"
        return reply or canned_answer(message)

    async def _dispatch(
        self, message: str, history: list[ConversationTurn], now: datetime | date | None
    ) -> str:
        intent = classify_intent(message, history)
        match intent:
            case Intent.TEST_REQUEST:
                return await self._answer_test(message)
            case Intent.GREETING:
                return GREETING_MESSAGE
            case Intent.FOLLOW_UP:
                prompt = rewrite_follow_up(message, history)
                return await self._answer_query(message, prompt, history, now)
            case Intent.GENERAL_QUERY:
                return await self._answer_query(message, message, history, now)

    async def _answer_test(self, message: str) -> str:
        difficulty = extract_difficulty(message)
        phase = extract_phase(message)
        if phase is None or phase not in self._catalog.phases():
            topic_test = self._generator.generate_topic(message, difficulty, self._test_questions)
            if topic_test is not None:
                return format_test(topic_test)
            return phase_menu(self._catalog)
        week = extract_week(message)
        if week is None:
            return week_menu(self._catalog, phase)
        if self._catalog.get_week(phase, week) is None:
            return week_menu(self._catalog, phase, requested=week)
        try:
            test = await self._generator.generate(
                phase, week, self._test_questions, difficulty=difficulty
            )
        except Exception as exc:
            logger.warning("Practice test generation failed", exc_info=True)
            return f"{TEST_APOLOGY} {error_tag(exc)}"
        return format_test(test)

    async def _answer_query(
        self,
        message: str,
        prompt: str,
        history: list[ConversationTurn],
        now: datetime | date | None,
    ) -> str:
        result = search_knowledge(self._store, self._matcher, message, self._search_limit, now)
        if self._is_direct_hit(result):
            logger.debug("Answering %r from the knowledge store", message[:80])
            return assemble_response(result)

        reply = await self._generate(prompt, history)
        if reply:
            return reply

        logger.info("Falling back to canned answer for %r", message[:80])
        return canned_answer(message)

    def _is_direct_hit(self, result: SearchResult) -> bool:
        """A tag browse with results, or a ranked match whose title shares a content word."""
        if not result.matches:
            return False
        if result.is_tag_browse:
            return True
        min_length = self._matcher.weights.min_token_length
        title_words = set(tokenize(result.matches[0].item.title, min_length))
        query_words = set(tokenize(result.query, min_length)) - _FILLER_WORDS
        return bool(title_words & query_words)

    async def _generate(self, prompt: str, history: list[ConversationTurn]) -> str | None:
        if self._llm is None:
            return None
        try:
            reply = await self._llm.generate(
                prompt,
                system=SYSTEM_PROMPT,
                history=history,
                max_tokens=_MAX_TOKENS,
                temperature=_TEMPERATURE,
            )
        except Exception:
            logger.warning("LLM call raised; using fallback text", exc_info=True)
            return None
        if reply is None or not reply.strip():
            return None
        return reply
