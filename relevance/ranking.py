# relevance/ranking.py

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from relevance.similarity import cosine_similarity, has_comparable_embeddings

DEFAULT_RELATED_LIMIT = 20
DEFAULT_TRENDING_LIMIT = 50
DEFAULT_DECAY_PER_HOUR = 0.05

SECONDS_PER_HOUR = 3600.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(ts: datetime) -> datetime:
    # naive timestamps are assumed to already be UTC
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class ScorableItem:
    """
    In-memory view of an insight used for ranking.
    Tags are lowercased, embedding may be empty.
    """
    id: Any
    tags: FrozenSet[str] = frozenset()
    embedding: Tuple[float, ...] = ()
    created_at: datetime = field(default_factory=_utcnow)
    upvote_count: int = 0
    downvote_count: int = 0

    def __post_init__(self):
        object.__setattr__(
            self, "tags", frozenset(t.strip().lower() for t in self.tags if t and t.strip())
        )
        object.__setattr__(self, "embedding", tuple(float(x) for x in (self.embedding or ())))

    @property
    def vote_balance(self) -> int:
        return self.upvote_count - self.downvote_count


@dataclass(frozen=True)
class RankedItem(ScorableItem):
    score: float = 0.0


def _with_score(item: ScorableItem, score: float) -> RankedItem:
    values = {f.name: getattr(item, f.name) for f in fields(ScorableItem)}
    return RankedItem(score=score, **values)


def _top(scored: List[RankedItem], limit: int) -> List[RankedItem]:
    limit = max(0, limit)
    # sorted() is stable: equal scores keep input order
    return sorted(scored, key=lambda r: -r.score)[:limit]


# -------------------------------------------------------------------
# Related insights
# -------------------------------------------------------------------
def shared_tag_count(a: ScorableItem, b: ScorableItem) -> int:
    return len(a.tags & b.tags)


def related_score(target: ScorableItem, candidate: ScorableItem) -> float:
    """Shared tags plus embedding similarity (only for comparable embeddings)."""
    score = float(shared_tag_count(target, candidate))
    if has_comparable_embeddings(candidate.embedding, target.embedding):
        score += cosine_similarity(candidate.embedding, target.embedding)
    return score


def rank_related(
    target: ScorableItem,
    candidates: Iterable[ScorableItem],
    limit: int = DEFAULT_RELATED_LIMIT,
) -> List[RankedItem]:
    """
    Rank an already-eligible candidate pool against `target`.
    The caller excludes the target itself and non-visible content.
    """
    if limit <= 0:
        return []
    scored = [_with_score(c, related_score(target, c)) for c in candidates]
    return _top(scored, limit)


# -------------------------------------------------------------------
# Trending
# -------------------------------------------------------------------
def age_hours(item: ScorableItem, now: datetime) -> float:
    delta = as_utc(now) - as_utc(item.created_at)
    return delta.total_seconds() / SECONDS_PER_HOUR


def trending_score(
    item: ScorableItem,
    now: datetime,
    decay_per_hour: float = DEFAULT_DECAY_PER_HOUR,
) -> float:
    """Vote balance minus a linear penalty per hour of age."""
    return item.vote_balance - age_hours(item, now) * decay_per_hour


def rank_trending(
    candidates: Sequence[ScorableItem],
    now: Optional[datetime] = None,
    limit: int = DEFAULT_TRENDING_LIMIT,
    decay_per_hour: float = DEFAULT_DECAY_PER_HOUR,
) -> List[RankedItem]:
    """
    Rank a time-windowed candidate pool by trending score.
    `now` defaults to the current UTC time.
    """
    if limit <= 0:
        return []
    if now is None:
        now = _utcnow()
    scored = [_with_score(c, trending_score(c, now, decay_per_hour)) for c in candidates]
    return _top(scored, limit)
