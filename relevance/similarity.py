# relevance/similarity.py

from typing import Optional, Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as _sk_cosine


def cosine_similarity(
    a: Optional[Sequence[float]], b: Optional[Sequence[float]]
) -> float:
    """
    Cosine similarity between two embeddings.

    Returns 0.0 when either vector is missing/empty, the lengths differ
    or any component is NaN or infinite.
    A zero-norm vector counts as norm 1, so the result is the raw dot
    product (0.0 for an all-zero vector).
    """
    if a is None or b is None:
        return 0.0
    if len(a) == 0 or len(b) == 0 or len(a) != len(b):
        return 0.0

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)

    # NaN / inf components carry no usable similarity
    if not (np.isfinite(va).all() and np.isfinite(vb).all()):
        return 0.0

    # sklearn leaves zero vectors unnormalized, which matches the norm-1 rule
    sim = _sk_cosine(va.reshape(1, -1), vb.reshape(1, -1))[0][0]
    return float(sim)


def has_comparable_embeddings(
    a: Optional[Sequence[float]], b: Optional[Sequence[float]]
) -> bool:
    """Both embeddings present, non-empty and of the same dimension."""
    return bool(a is not None and b is not None and len(a) > 0 and len(a) == len(b))
