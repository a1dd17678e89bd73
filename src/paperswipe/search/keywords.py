"""Keyword heuristic for interest-based arXiv queries."""

from __future__ import annotations

import re

STOP_WORDS = frozenset(
    {"the", "a", "an", "of", "for", "in", "on", "with", "to", "at", "by", "is", "are", "and", "or"}
)
RECENT_TITLES = 3
MAX_KEYWORDS = 3
MIN_KEYWORD_LEN = 5

_SPLIT_RE = re.compile(r"[\s\W]+")


def extract_keywords(titles: list[str]) -> str:
    """Build an OR-joined arXiv query fragment from the most recently liked titles.

    Returns "" when nothing qualifies, e.g. no likes or only short/stop words.
    """
    if not titles:
        return ""

    text = " ".join(titles[-RECENT_TITLES:]).lower()

    keywords: list[str] = []
    for word in _SPLIT_RE.split(text):
        if len(word) < MIN_KEYWORD_LEN or word in STOP_WORDS:
            continue
        if word not in keywords:
            keywords.append(word)
        if len(keywords) == MAX_KEYWORDS:
            break

    return " OR ".join(f"all:{k}" for k in keywords)
