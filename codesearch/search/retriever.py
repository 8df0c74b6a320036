# Over-fetching retriever: one index call for `multiplier * limit` candidates,
# then every candidate is decoded. A single bad payload fails the whole call.

from __future__ import annotations

import logging
from typing import List, Sequence, TYPE_CHECKING

from codesearch.errors import DecodeError, InternalError
from .decode import decode_candidate
from .types import SearchQuery, Snippet

if TYPE_CHECKING:
    from codesearch.semantic import Semantic

logger = logging.getLogger(__name__)

DEFAULT_OVERFETCH = 4


class Retriever:
    def __init__(self, semantic: "Semantic", overfetch_multiplier: int = DEFAULT_OVERFETCH):
        if overfetch_multiplier < 1:
            raise ValueError("overfetch_multiplier must be >= 1")
        self.semantic = semantic
        self.overfetch_multiplier = overfetch_multiplier

    def candidate_count(self, limit: int) -> int:
        return self.overfetch_multiplier * limit

    def retrieve(self, query: SearchQuery, query_embedding: Sequence[float], limit: int) -> List[Snippet]:
        requested = self.candidate_count(limit)
        try:
            raw = self.semantic.search(query.parsed, query_embedding, requested)
            dim = self.semantic.dim
        except Exception as e:
            logger.error("vector index search failed for %r: %s", query.target, e)
            raise InternalError() from e

        snippets: List[Snippet] = []
        for pos, candidate in enumerate(raw):
            try:
                snippets.append(decode_candidate(candidate, dim=dim))
            except DecodeError as e:
                logger.error("failed to decode candidate #%d (score=%s): %s", pos, candidate.score, e)
                raise InternalError() from e

        logger.debug("retrieved %d/%d candidates for %r", len(snippets), requested, query.target)
        return snippets
