# Capability object for semantic search.
# A deployment either has a Semantic (index + embedder) or it has None.

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

from codesearch.errors import EmbeddingError
from codesearch.query.parser import ParsedQuery
from codesearch.search.types import RawCandidate

if TYPE_CHECKING:
    from codesearch.settings import Settings

logger = logging.getLogger(__name__)


class Semantic:
    """
    Bundles a vector index and an embedder.

    index:    search(query_vector, limit, filters) -> list[RawCandidate]; optional `dim`
    embedder: embed(text) -> list[float]
    """

    def __init__(self, index, embedder):
        self.index = index
        self.embedder = embedder

    @property
    def dim(self) -> Optional[int]:
        return getattr(self.index, "dim", None)

    def embed(self, text: str) -> List[float]:
        try:
            return list(self.embedder.embed(text))
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(str(e)) from e

    def search(self, parsed: ParsedQuery, query_vector: Sequence[float], limit: int) -> List[RawCandidate]:
        return self.index.search(query_vector, limit, filters=parsed.filters())


def build_embedder(settings: "Settings"):
    if settings.EMBED_BACKEND == "sentence-transformers":
        from .embedders import SentenceTransformerEmbedder
        return SentenceTransformerEmbedder(model_name=settings.EMBED_MODEL)
    from .embedders import OllamaEmbedder
    return OllamaEmbedder(host=settings.OLLAMA_HOST, model=settings.EMBED_MODEL, timeout=settings.EMBED_TIMEOUT)


def build_semantic(settings: "Settings") -> Optional[Semantic]:
    """Semantic for the configured backend, or None when no index is set up."""
    if settings.INDEX_BACKEND == "faiss":
        if not settings.FAISS_PATH:
            logger.warning("INDEX_BACKEND=faiss but FAISS_PATH is unset; semantic search disabled")
            return None
        from .faiss_index import FaissIndex
        index = FaissIndex(settings.FAISS_PATH, payloads_path=settings.PAYLOADS_PATH)
    elif settings.INDEX_BACKEND == "qdrant":
        if not settings.QDRANT_URL:
            logger.warning("INDEX_BACKEND=qdrant but QDRANT_URL is unset; semantic search disabled")
            return None
        from .qdrant_index import QdrantIndex
        index = QdrantIndex(url=settings.QDRANT_URL, collection=settings.QDRANT_COLLECTION,
                            api_key=settings.QDRANT_API_KEY)
    else:
        return None
    logger.info("semantic search enabled (index=%s, embed=%s)", settings.INDEX_BACKEND, settings.EMBED_BACKEND)
    return Semantic(index=index, embedder=build_embedder(settings))


__all__ = ["Semantic", "build_semantic", "build_embedder"]
