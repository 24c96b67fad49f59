"""Detects "CHM <tag> topics" browse queries."""

import re

# A fixed phrasing, not NLP: the marker word CHM, one tag word, then "topics".
_TAG_QUERY_RE = re.compile(r"\bCHM\s+([\w-]+)\s+topics\b", re.IGNORECASE)


def detect_tag_query(query: str) -> str | None:
    """Return the lowercased tag word if query asks to browse a tag, else None."""
    match = _TAG_QUERY_RE.search(query)
    if match is None:
        return None
    return match.group(1).lower()
