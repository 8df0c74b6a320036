# Data models for the search layer.
# RawCandidate is what an index returns; Snippet is what callers get back.

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from codesearch.query.parser import ParsedQuery


@dataclass
class RawCandidate:
    """One scored point as returned by a vector index, before decoding."""
    score: float
    payload: Dict[str, Any]
    vector: Optional[Any] = None


@dataclass(frozen=True)
class Snippet:
    """A decoded search hit with source location and its stored embedding."""
    lang: str
    repo_name: str
    repo_ref: str
    relative_path: str
    text: str
    start_line: int
    end_line: int
    start_byte: int
    end_byte: int
    score: float
    embedding: Tuple[float, ...] = field(repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lang": self.lang,
            "repo_name": self.repo_name,
            "repo_ref": self.repo_ref,
            "relative_path": self.relative_path,
            "text": self.text,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "start_byte": self.start_byte,
            "end_byte": self.end_byte,
            "score": self.score,
            "embedding": list(self.embedding),
        }


@dataclass(frozen=True)
class SearchQuery:
    """A raw query resolved into its parsed form and embedding target."""
    raw: str
    parsed: ParsedQuery
    target: str
