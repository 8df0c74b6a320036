# Remote vector index backed by a Qdrant collection.
# `path:` filters use MatchText (full-text) since Qdrant has no prefix match;
# the FAISS backend matches `path:` as a prefix.

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from qdrant_client import QdrantClient, models

from codesearch.search.types import RawCandidate


def build_filter(filters: Optional[Dict[str, List[str]]]) -> Optional[models.Filter]:
    if not filters:
        return None
    must = []
    for key, values in filters.items():
        if key == "relative_path":
            must.append(models.Filter(should=[
                models.FieldCondition(key=key, match=models.MatchText(text=v)) for v in values
            ]))
        else:
            must.append(models.FieldCondition(key=key, match=models.MatchAny(any=list(values))))
    return models.Filter(must=must)


class QdrantIndex:
    def __init__(self, url: Optional[str] = None, collection: str = "documents", api_key: Optional[str] = None,
                 dim: Optional[int] = None, client: Optional[QdrantClient] = None):
        self.collection = collection
        self.dim = dim
        self.client = client or QdrantClient(url=url, api_key=api_key)

    def search(self, query_vector: Sequence[float], limit: int,
               filters: Optional[Dict[str, List[str]]] = None) -> List[RawCandidate]:
        if limit <= 0:
            return []
        resp = self.client.query_points(
            collection_name=self.collection,
            query=[float(x) for x in query_vector],
            query_filter=build_filter(filters),
            limit=limit,
            with_payload=True,
            with_vectors=True,
        )
        # named or sparse vectors come through as-is; the decoder rejects them
        return [
            RawCandidate(score=float(p.score), payload=dict(p.payload or {}), vector=p.vector)
            for p in resp.points
        ]
