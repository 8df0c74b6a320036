# Request pipeline: resolve the query, embed its target, retrieve and decode
# candidates, then collapse near-duplicates into the final ranked list.

from __future__ import annotations

import logging
from typing import List, Optional, TYPE_CHECKING

from codesearch.errors import ConfigurationError, EmbeddingError, InternalError, QueryParseError, UserError
from codesearch.query.parser import parse_nl, resolve_target
from .dedupe import DEFAULT_THRESHOLD, dedupe
from .retriever import DEFAULT_OVERFETCH, Retriever
from .types import SearchQuery, Snippet

if TYPE_CHECKING:
    from codesearch.semantic import Semantic

logger = logging.getLogger(__name__)


def resolve_query(raw: str) -> SearchQuery:
    try:
        parsed = parse_nl(raw)
    except QueryParseError as e:
        raise UserError(f"invalid query: {e}") from e
    return SearchQuery(raw=raw, parsed=parsed, target=resolve_target(parsed))


class SearchPipeline:
    """
    Runs one search request end to end.

    `semantic` is None when no vector index is configured for the deployment;
    every request then fails with a ConfigurationError before any other work.
    """

    def __init__(
        self,
        semantic: Optional["Semantic"],
        overfetch_multiplier: int = DEFAULT_OVERFETCH,
        dedup_threshold: float = DEFAULT_THRESHOLD,
        suppress_overlaps: bool = False,
    ):
        self.semantic = semantic
        self.overfetch_multiplier = overfetch_multiplier
        self.dedup_threshold = dedup_threshold
        self.suppress_overlaps = suppress_overlaps

    def run(self, query: str, limit: int) -> List[Snippet]:
        if self.semantic is None:
            raise ConfigurationError("vector index not configured")
        if limit < 0:
            raise UserError("limit must be >= 0")

        resolved = resolve_query(query)

        try:
            query_embedding = self.semantic.embed(resolved.target)
        except EmbeddingError as e:
            logger.error("failed to embed query: %s", e)
            raise InternalError() from e

        retriever = Retriever(self.semantic, overfetch_multiplier=self.overfetch_multiplier)
        candidates = retriever.retrieve(resolved, query_embedding, limit)

        try:
            snippets = dedupe(
                candidates,
                query_embedding,
                limit,
                threshold=self.dedup_threshold,
                suppress_overlaps=self.suppress_overlaps,
            )
        except ValueError as e:
            logger.error("dedupe rejected candidates for %r: %s", resolved.target, e)
            raise InternalError() from e

        logger.debug(
            "query %r: %d candidates -> %d snippets (limit=%d)",
            resolved.target, len(candidates), len(snippets), limit,
        )
        return snippets
