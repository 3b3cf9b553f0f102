from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from relevance.ranking import (
    RankedItem,
    ScorableItem,
    rank_related,
    rank_trending,
    related_score,
    trending_score,
)

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def _item(item_id: str, *, tags=(), embedding=(), hours_old: float = 0.0, up: int = 0, down: int = 0) -> ScorableItem:
    return ScorableItem(
        id=item_id,
        tags=frozenset(tags),
        embedding=tuple(embedding),
        created_at=NOW - timedelta(hours=hours_old),
        upvote_count=up,
        downvote_count=down,
    )


def _random_pool(seed: int, size: int = 40) -> list[ScorableItem]:
    rng = random.Random(seed)
    vocab = ["ai", "ml", "python", "rust", "data", "web", "cloud"]
    pool = []
    for i in range(size):
        dim = rng.choice([0, 4, 4, 4, 3])
        pool.append(
            _item(
                f"i{i}",
                tags=rng.sample(vocab, rng.randint(0, 3)),
                embedding=[rng.uniform(-1, 1) for _ in range(dim)],
                hours_old=rng.uniform(0, 24 * 7),
                up=rng.randint(0, 30),
                down=rng.randint(0, 10),
            )
        )
    return pool


def test_scorable_item_normalizes_tags_and_embedding() -> None:
    item = ScorableItem(id="x", tags=["AI", " ml ", ""], embedding=[1, 2])
    assert item.tags == frozenset({"ai", "ml"})
    assert item.embedding == (1.0, 2.0)
    assert item.created_at.tzinfo is not None


# -------------------------------------------------------------------
# Related
# -------------------------------------------------------------------
def test_rank_related_empty_pool() -> None:
    assert rank_related(_item("t", tags={"ai"}), []) == []


def test_more_shared_tags_rank_higher() -> None:
    target = _item("t", tags={"ai", "ml"})
    a = _item("a", tags={"ai"})
    b = _item("b", tags={"ai", "ml"})

    ranked = rank_related(target, [a, b])
    assert [r.id for r in ranked] == ["b", "a"]
    assert ranked[0].score == 2.0
    assert ranked[1].score == 1.0
    assert all(isinstance(r, RankedItem) for r in ranked)


def test_embedding_similarity_breaks_tag_ties() -> None:
    target = _item("t", tags={"ai"}, embedding=[1.0, 0.0])
    far = _item("far", tags={"ai"}, embedding=[0.0, 1.0])
    near = _item("near", tags={"ai"}, embedding=[1.0, 0.1])

    ranked = rank_related(target, [far, near])
    assert [r.id for r in ranked] == ["near", "far"]
    assert ranked[0].score == pytest.approx(1.0 + 0.995, abs=1e-3)


def test_missing_or_mismatched_embeddings_add_nothing() -> None:
    target = _item("t", tags={"ai"}, embedding=[1.0, 0.0, 0.0])
    no_emb = _item("a", tags={"ai"})
    wrong_dim = _item("b", tags={"ai"}, embedding=[1.0, 0.0])

    assert related_score(target, no_emb) == 1.0
    assert related_score(target, wrong_dim) == 1.0
    assert related_score(_item("t2", tags={"ai"}), _item("c", tags={"ai"}, embedding=[1.0])) == 1.0


def test_nan_embedding_ranks_on_shared_tags_only() -> None:
    target = _item("t", tags={"ai", "ml"}, embedding=[1.0, 0.0])
    broken = _item("broken", tags={"ai", "ml"}, embedding=[float("nan"), 0.0])
    single = _item("single", tags={"ai"}, embedding=[0.0, 1.0])

    ranked = rank_related(target, [single, broken])
    assert [r.id for r in ranked] == ["broken", "single"]
    assert ranked[0].score == 2.0
    assert ranked[1].score == pytest.approx(1.0)


def test_related_ties_keep_input_order() -> None:
    target = _item("t", tags={"ai"})
    pool = [_item(f"c{i}", tags={"ai"}) for i in range(5)]
    assert [r.id for r in rank_related(target, pool)] == ["c0", "c1", "c2", "c3", "c4"]


@pytest.mark.parametrize("limit, expected", [(0, 0), (-5, 0), (3, 3), (100, 10)])
def test_related_limit(limit: int, expected: int) -> None:
    target = _item("t", tags={"ai"})
    pool = [_item(f"c{i}", tags={"ai"}) for i in range(10)]
    assert len(rank_related(target, pool, limit=limit)) == expected


def test_related_default_limit_is_twenty() -> None:
    target = _item("t", tags={"ai"})
    pool = [_item(f"c{i}", tags={"ai"}) for i in range(30)]
    assert len(rank_related(target, pool)) == 20


# -------------------------------------------------------------------
# Trending
# -------------------------------------------------------------------
def test_trending_score_formula() -> None:
    item = _item("a", hours_old=10, up=7, down=2)
    assert trending_score(item, NOW) == pytest.approx(5 - 10 * 0.05)
    assert trending_score(item, NOW, decay_per_hour=1.0) == pytest.approx(-5.0)


def test_older_item_ranks_lower_with_equal_votes() -> None:
    young = _item("young", hours_old=1, up=5, down=1)
    old = _item("old", hours_old=48, up=5, down=1)

    ranked = rank_trending([old, young], now=NOW, decay_per_hour=0.05)
    assert [r.id for r in ranked] == ["young", "old"]
    assert ranked[0].score > ranked[1].score


def test_votes_can_outweigh_age() -> None:
    popular_old = _item("popular", hours_old=24, up=20)
    fresh = _item("fresh", hours_old=0, up=1)
    ranked = rank_trending([fresh, popular_old], now=NOW)
    assert ranked[0].id == "popular"


def test_trending_respects_limit() -> None:
    pool = _random_pool(seed=3, size=80)
    assert len(rank_trending(pool, now=NOW, limit=10)) == 10
    assert len(rank_trending(pool, now=NOW)) == 50
    assert rank_trending(pool, now=NOW, limit=0) == []
    assert rank_trending([], now=NOW) == []


def test_trending_ties_keep_input_order() -> None:
    pool = [_item(f"c{i}", hours_old=2, up=3) for i in range(4)]
    assert [r.id for r in rank_trending(pool, now=NOW)] == ["c0", "c1", "c2", "c3"]


def test_naive_timestamps_are_treated_as_utc() -> None:
    naive_now = NOW.replace(tzinfo=None)
    item = ScorableItem(id="n", created_at=naive_now - timedelta(hours=20), upvote_count=1)
    assert trending_score(item, NOW) == pytest.approx(1 - 20 * 0.05)
    assert trending_score(_item("a", hours_old=20, up=1), naive_now) == pytest.approx(0.0)


def test_trending_without_now_uses_current_time() -> None:
    item = ScorableItem(id="a", upvote_count=2)
    ranked = rank_trending([item])
    assert ranked[0].score == pytest.approx(2.0, abs=1e-3)


# -------------------------------------------------------------------
# Determinism
# -------------------------------------------------------------------
@pytest.mark.parametrize("seed", range(5))
def test_ranking_is_deterministic(seed: int) -> None:
    pool = _random_pool(seed)
    target = _item("target", tags={"ai", "python"}, embedding=[0.5, 0.5, 0.1, -0.2])

    assert rank_related(target, pool) == rank_related(target, pool)
    assert rank_trending(pool, now=NOW) == rank_trending(pool, now=NOW)


@pytest.mark.parametrize("seed", range(5))
def test_ranked_output_is_sorted_descending(seed: int) -> None:
    pool = _random_pool(seed)
    target = _item("target", tags={"data"}, embedding=[1.0, 0.0, 0.0, 0.0])

    for ranked in (rank_related(target, pool), rank_trending(pool, now=NOW)):
        scores = [r.score for r in ranked]
        assert scores == sorted(scores, reverse=True)
