"""Keyword extraction for comparable item matching."""

import re
from typing import List

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "for", "with", "of", "in", "on", "at", "to", "from",
    "used", "brand", "new", "sale", "excellent", "good", "like", "condition",
})

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")

MAX_KEYWORDS = 6


def extract_keywords(title: str, description: str = "", limit: int = MAX_KEYWORDS) -> List[str]:
    """Pull up to ``limit`` distinct search keywords from a title and description.

    Tokens are lowercased, stripped of punctuation, and dropped if they are two
    characters or shorter or a stop word. First-seen order is preserved.
    """
    text = _NON_ALNUM.sub(" ", f"{title or ''} {description or ''}".lower())

    keywords: List[str] = []
    seen = set()
    for token in text.split():
        if len(token) <= 2 or token in STOP_WORDS or token in seen:
            continue
        seen.add(token)
        keywords.append(token)
        if len(keywords) >= limit:
            break
    return keywords
