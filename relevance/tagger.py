# relevance/tagger.py

from collections import Counter
from typing import List, Optional

from relevance.tokenizer import STOPWORDS, is_bengali, tokenize

DEFAULT_MAX_KEYWORDS = 5

UNIGRAM_WEIGHT = 1
BIGRAM_WEIGHT = 2


def _ngrams(tokens: List[str]):
    """Unigrams first, then bigrams, both in token order."""
    for tok in tokens:
        yield (tok,)
    for i in range(len(tokens) - 1):
        yield (tokens[i], tokens[i + 1])


def extract_keywords(text: Optional[str], max_k: int = DEFAULT_MAX_KEYWORDS) -> List[str]:
    """
    Local keyword extractor used to suggest tags:
    - tokenizes and drops stopwords / short tokens
    - scores unigrams (+1 per occurrence) and bigrams (+2 per occurrence)
    - returns the top `max_k` n-grams by score

    Ties keep first-seen order: Counter preserves insertion order and
    sorted() is stable.
    """
    max_k = max(0, max_k)
    if max_k == 0:
        return []

    tokens = tokenize(text)
    if not tokens:
        return []

    freq: Counter = Counter()
    for gram in _ngrams(tokens):
        if all(word in STOPWORDS for word in gram):
            continue
        weight = BIGRAM_WEIGHT if len(gram) == 2 else UNIGRAM_WEIGHT
        freq[" ".join(gram)] += weight

    ranked = sorted(freq.items(), key=lambda x: -x[1])
    return [kw for (kw, _) in ranked[:max_k]]


def suggest_tags(
    title: Optional[str],
    body: Optional[str],
    max_k: int = DEFAULT_MAX_KEYWORDS,
) -> List[str]:
    """
    Suggest tags for an insight from its title + body.
    Bengali content gets no suggestions.
    """
    content = f"{title or ''} {body or ''}".strip()
    if not content or is_bengali(content):
        return []
    return extract_keywords(content, max_k=max_k)
