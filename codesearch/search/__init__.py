# Makes the folder importable as a package.
# Exports the pipeline pieces for convenience.

from .decode import decode_candidate
from .dedupe import dedupe
from .pipeline import SearchPipeline, resolve_query
from .retriever import Retriever
from .types import RawCandidate, SearchQuery, Snippet

__all__ = [
    "decode_candidate",
    "dedupe",
    "SearchPipeline",
    "resolve_query",
    "Retriever",
    "RawCandidate",
    "SearchQuery",
    "Snippet",
]
