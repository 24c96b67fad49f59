"""Markdown formatters for chat replies."""

from chm_assistant.models.knowledge import KnowledgeItem, Phase
from chm_assistant.models.quiz import DifficultySetting, GeneratedTest, TestQuestion
from chm_assistant.models.search import SearchResult

SUMMARY_MIN_LINE = 20
SUMMARY_FALLBACK_CHARS = 150
SUMMARY_MAX_CHARS = 200
RELATED_COUNT = 2

_MARKUP_PREFIXES = ("•", "-", "*", "#", ">")
_TERMINAL = (".", "!", "?", "...")

NO_RESULTS_MESSAGE = (
    "I don't have specific information about that topic in the CHM curriculum database. "
    "Try asking about the M1 foundation phase, MCE rotations, LCE clerkships, learning "
    "societies, the ASK research project, summer research, or USMLE board preparation."
)


def extract_summary(content: str) -> str:
    """One-line summary: the first plain prose line, else the start of the content."""
    summary = ""
    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith(_MARKUP_PREFIXES):
            continue
        if len(stripped) > SUMMARY_MIN_LINE:
            summary = stripped
            break

    if not summary:
        summary = content[:SUMMARY_FALLBACK_CHARS].strip()
        if len(content) > SUMMARY_FALLBACK_CHARS:
            return summary + "..."

    if len(summary) > SUMMARY_MAX_CHARS:
        return summary[:SUMMARY_MAX_CHARS].strip() + "..."
    if not summary.endswith(_TERMINAL):
        summary += "..."
    return summary


def format_tags(item: KnowledgeItem) -> str:
    """Format: #tag1 #tag2 (empty when the item has no tags)."""
    return " ".join(f"#{tag}" for tag in item.tags)


def format_no_results() -> str:
    """Fixed reply when nothing cleared the relevance floor."""
    return NO_RESULTS_MESSAGE


def format_tag_browse(items: list[KnowledgeItem], tag: str | None = None) -> str:
    """Several items side by side, separated by horizontal rules."""
    heading = f"## Related CHM {tag.title()} Topics" if tag else "## Related CHM Topics"
    blocks: list[str] = []
    for item in items:
        lines = [f"### {item.title}", extract_summary(item.content), ""]
        if item.phase != Phase.GENERAL:
            lines.append(f"**Phase**: {item.phase.value}")
        if item.url:
            lines.append(f"**More Info**: [View full details]({item.url})")
        tags = format_tags(item)
        if tags:
            lines.append(f"**Topics**: {tags}")
        blocks.append("\n".join(lines).rstrip())
    return heading + "\n\n" + "\n\n---\n\n".join(blocks)


def format_detailed(items: list[KnowledgeItem]) -> str:
    """Primary item in full, followed by a short related-resources list."""
    primary = items[0]
    parts = [f"## {primary.title}\n\n{primary.content}".rstrip()]

    related = items[1 : 1 + RELATED_COUNT]
    if related:
        lines = ["---", "", "### Related Resources:", ""]
        for item in related:
            lines.append(f"**{item.title}**")
            lines.append(extract_summary(item.content))
            if item.url:
                lines.append(f"[View details]({item.url})")
            lines.append("")
        parts.append("\n".join(lines).rstrip())

    meta: list[str] = []
    tags = format_tags(primary)
    if tags:
        meta.append(f"**Topics**: {tags}")
    if primary.phase != Phase.GENERAL:
        meta.append(f"**Phase**: {primary.phase.value}")
    if meta:
        parts.append(" | ".join(meta))
    if primary.url:
        parts.append(f"**Full Information**: [View complete details]({primary.url})")
    return "\n\n".join(parts)


def assemble_response(result: SearchResult) -> str:
    """Turn a search result into the chat reply."""
    items = result.items
    if not items:
        return format_no_results()
    if result.is_tag_browse and len(items) > 1:
        return format_tag_browse(items, result.browse_tag)
    return format_detailed(items)


def _format_question(number: int, question: TestQuestion) -> str:
    lines = [
        f"**Question {number}** ({question.type.value}, {question.difficulty.value})",
        question.question,
    ]
    for index, option in enumerate(question.options):
        lines.append(f"{chr(ord('A') + index)}. {option}")
    return "\n".join(lines)


def _format_answer(number: int, question: TestQuestion) -> str:
    letter = question.answer_letter
    if letter is not None:
        lines = [f"**{number}. {letter}**: {question.explanation}"]
    else:
        lines = [f"**{number}.** {question.correct_answer}", f"   {question.explanation}"]
    if question.option_feedback:
        for index, feedback in enumerate(question.option_feedback):
            lines.append(f"   • {chr(ord('A') + index)}: {feedback}")
    return "\n".join(lines)


def format_test(test: GeneratedTest) -> str:
    """Practice test with numbered questions and an answer key."""
    if test.week is not None:
        scope = f"**Phase**: {test.phase.value} | **Week**: {test.week}"
    else:
        scope = f"**Topic**: {(test.topic or 'general').title()}"
    if test.difficulty is not DifficultySetting.MIXED:
        scope += f" | **Difficulty**: {test.difficulty.value.title()}"
    header = (
        f"## {test.title}\n\n"
        f"{scope} | "
        f"**Questions**: {test.total_questions} | "
        f"**Time Allowed**: {test.time_allowed} minutes | "
        f"**Passing Score**: {test.passing_score}%"
    )
    questions = "\n\n".join(
        _format_question(n, q) for n, q in enumerate(test.questions, start=1)
    )
    answers = "\n\n".join(_format_answer(n, q) for n, q in enumerate(test.questions, start=1))
    return f"{header}\n\n{questions}\n\n---\n\n### Answer Key\n\n{answers}"
