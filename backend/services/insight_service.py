# backend/services/insight_service.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union

from fastapi import HTTPException

from backend import config
from relevance.embeddings import generate_embedding, get_embedder
from relevance.ranking import RankedItem, ScorableItem, as_utc, rank_related, rank_trending
from relevance.tagger import suggest_tags as _suggest_tags

logger = logging.getLogger(__name__)

_embedder = None


def _get_embedder():
    """Build the configured embedder once per process."""
    global _embedder
    if _embedder is None:
        if config.EMBEDDING_BACKEND == "local":
            _embedder = get_embedder("local")
        else:
            _embedder = get_embedder(
                "huggingface",
                api_key=config.HUGGINGFACE_API_KEY,
                base_url=config.HF_API_URL,
                timeout=config.HF_TIMEOUT_SECONDS,
                retries=config.HF_MAX_RETRIES,
            )
    return _embedder


# -------------------------------------------------------------------
# Helpers (content-store / moderation side)
# -------------------------------------------------------------------
def to_scorable(insight: Dict[str, Any]) -> ScorableItem:
    """Project an insight payload onto the fields the ranker uses."""
    kwargs = {
        "id": insight.get("id"),
        "tags": insight.get("tags") or [],
        "embedding": insight.get("embedding") or [],
        "upvote_count": int(insight.get("upvote_count") or 0),
        "downvote_count": int(insight.get("downvote_count") or 0),
    }
    if insight.get("created_at") is not None:
        kwargs["created_at"] = as_utc(insight["created_at"])
    return ScorableItem(**kwargs)


def is_visible(insight: Dict[str, Any]) -> bool:
    """Public and not hidden by a moderator."""
    return insight.get("visibility", "public") == "public" and not insight.get("is_hidden")


def parse_window(window: Union[str, int, None]) -> int:
    """
    Window in days: "7d", "7" or 7.
    Anything invalid or non-positive falls back to the default.
    """
    default = config.TRENDING_DEFAULT_WINDOW_DAYS
    if window is None:
        return default
    try:
        days = int(str(window).strip().lower().replace("d", ""))
    except ValueError:
        return default
    return days if days > 0 else default


def matches_query(insight: Dict[str, Any], q: Optional[str]) -> bool:
    q = (q or "").strip().lower()
    if not q:
        return True
    title = (insight.get("title") or "").lower()
    body = (insight.get("body") or "").lower()
    return q in title or q in body


def _merge(insights_by_id: Dict[Any, Dict[str, Any]], ranked: List[RankedItem]) -> List[Dict[str, Any]]:
    return [{**insights_by_id[r.id], "score": r.score} for r in ranked]


# -------------------------------------------------------------------
# Tag suggestion & embeddings
# -------------------------------------------------------------------
def _content(title: Optional[str], body: Optional[str]) -> str:
    return f"{title or ''} {body or ''}".strip()


def suggest_tags(title: Optional[str], body: Optional[str]) -> List[str]:
    if not _content(title, body):
        raise HTTPException(status_code=400, detail="Title or body is required for tag suggestion")

    tags = _suggest_tags(title, body, max_k=config.TAG_SUGGESTION_LIMIT)
    logger.info("[suggest_tags] suggested %d tags", len(tags))
    return tags


def build_embedding(title: Optional[str], body: Optional[str]) -> List[float]:
    content = _content(title, body)
    if not content:
        raise HTTPException(status_code=400, detail="Title or body is required for embedding")

    embedding = generate_embedding(content, embedder=_get_embedder())
    logger.info("[build_embedding] embedding length: %d", len(embedding))
    return embedding


# -------------------------------------------------------------------
# Ranking
# -------------------------------------------------------------------
def related_insights(
    target: Dict[str, Any],
    candidates: List[Dict[str, Any]],
    limit: int = config.RELATED_DEFAULT_LIMIT,
) -> List[Dict[str, Any]]:
    """
    Candidates must be visible, not the target itself, and share
    at least one tag with the target before they are ranked.
    """
    base = to_scorable(target)
    if not base.tags:
        return []

    eligible: Dict[Any, Dict[str, Any]] = {}
    pool: List[ScorableItem] = []
    for c in candidates:
        if c.get("id") == target.get("id") or not is_visible(c):
            continue
        item = to_scorable(c)
        if not (item.tags & base.tags) or item.id in eligible:
            continue
        eligible[item.id] = c
        pool.append(item)

    ranked = rank_related(base, pool, limit=limit)
    logger.info("[related_insights] %d eligible, returning %d", len(pool), len(ranked))
    return _merge(eligible, ranked)


def trending_insights(
    candidates: List[Dict[str, Any]],
    window: Union[str, int, None] = None,
    q: Optional[str] = None,
    tag: Optional[str] = None,
    limit: int = config.TRENDING_DEFAULT_LIMIT,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Visible insights created inside the window, optionally filtered by
    a text query and an exact tag, ranked by trending score.
    """
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    since = now - timedelta(days=parse_window(window))
    tag = (tag or "").strip().lower()

    eligible: Dict[Any, Dict[str, Any]] = {}
    pool: List[ScorableItem] = []
    for c in candidates:
        if not is_visible(c) or not matches_query(c, q):
            continue
        item = to_scorable(c)
        if as_utc(item.created_at) < since:
            continue
        if tag and tag not in item.tags:
            continue
        if item.id in eligible:
            continue
        eligible[item.id] = c
        pool.append(item)

    ranked = rank_trending(
        pool, now=now, limit=limit, decay_per_hour=config.TRENDING_DECAY_PER_HOUR
    )
    logger.info("[trending_insights] %d in window, returning %d", len(pool), len(ranked))
    return _merge(eligible, ranked)
