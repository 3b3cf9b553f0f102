# relevance/tokenizer.py

import re
from typing import List, Optional

# Fixed stopword set; tokens of 3 chars or less are dropped anyway
STOPWORDS = frozenset({
    "of", "in", "to", "and", "the", "a", "an", "for", "with",
    "on", "at", "by", "is", "are",
})

MIN_TOKEN_LENGTH = 4

_NON_WORD = re.compile(r"\W+")
_BENGALI = re.compile(r"[\u0980-\u09FF]")


def tokenize(text: Optional[str]) -> List[str]:
    """
    Split free text into lowercase word tokens:
    - splits on any run of non-word characters
    - removes stopwords and tokens shorter than 4 chars
    """
    if not text:
        return []

    tokens = _NON_WORD.split(text.lower())
    return [
        t for t in tokens
        if len(t) >= MIN_TOKEN_LENGTH and t not in STOPWORDS
    ]


def is_bengali(text: Optional[str]) -> bool:
    """True if the text contains any Bengali script character."""
    if not text:
        return False
    return _BENGALI.search(text) is not None
