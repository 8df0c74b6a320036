# Near-duplicate suppression for retrieved snippets.
# Ranks candidates by cosine similarity to the query embedding, then greedily
# keeps a candidate only if it is not too close to anything already kept.

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .types import Snippet

DEFAULT_THRESHOLD = 0.96


def _normalize_embeddings(embs: np.ndarray) -> np.ndarray:
    """L2-normalize rows; zero rows stay zero."""
    embs = np.asarray(embs, dtype=np.float32)
    norms = np.linalg.norm(embs, axis=1, keepdims=True)
    norms[norms == 0.0] = 1.0
    return embs / norms


def _overlaps(a: Snippet, b: Snippet) -> bool:
    return (
        a.repo_name == b.repo_name
        and a.repo_ref == b.repo_ref
        and a.relative_path == b.relative_path
        and a.start_byte < b.end_byte
        and b.start_byte < a.end_byte
    )


def query_similarities(candidates: Sequence[Snippet], query_embedding: Sequence[float]) -> np.ndarray:
    """Cosine similarity of every candidate to the query, shape (N,)."""
    embs = np.array([c.embedding for c in candidates], dtype=np.float32)
    q = np.asarray(query_embedding, dtype=np.float32).reshape(1, -1)
    if embs.ndim != 2:
        raise ValueError("candidate embeddings must share one dimension")
    if q.shape[1] != embs.shape[1]:
        raise ValueError(f"query dimension {q.shape[1]} != candidate dimension {embs.shape[1]}")
    return (_normalize_embeddings(embs) @ _normalize_embeddings(q)[0]).astype(np.float64)


def dedupe(
    candidates: Sequence[Snippet],
    query_embedding: Sequence[float],
    limit: int,
    threshold: float = DEFAULT_THRESHOLD,
    suppress_overlaps: bool = False,
) -> List[Snippet]:
    """
    Select at most `limit` snippets, most query-similar first.

    A candidate is skipped when its cosine similarity to an already selected
    snippet is strictly above `threshold` (or, with `suppress_overlaps`, when
    it covers an intersecting byte range of the same file at the same ref).
    Ties keep input order. Inputs are not mutated; the result is never padded.
    """
    if limit < 0:
        raise ValueError("limit must be >= 0")
    if not candidates or limit == 0:
        return []

    sims = query_similarities(candidates, query_embedding)
    order = np.argsort(-sims, kind="stable")
    nen = _normalize_embeddings(np.array([c.embedding for c in candidates], dtype=np.float32))

    keep: List[int] = []
    for i in order:
        i = int(i)
        if keep:
            pair_sims = nen[keep] @ nen[i]
            if np.any(pair_sims > threshold):
                continue
            if suppress_overlaps and any(_overlaps(candidates[k], candidates[i]) for k in keep):
                continue
        keep.append(i)
        if len(keep) == limit:
            break

    return [candidates[i] for i in keep]
