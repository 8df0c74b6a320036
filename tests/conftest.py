# Shared fakes for the search layer: an in-memory index and embedder that
# record every call, plus a payload builder.

from typing import Dict, List, Optional

import pytest

from codesearch.search.types import RawCandidate
from codesearch.semantic import Semantic


def make_payload(**overrides) -> Dict[str, object]:
    payload = {
        "lang": "python",
        "repo_name": "acme/parser",
        "repo_ref": "main",
        "relative_path": "src/json_parse.py",
        "snippet": "def parse(s):\n    return json.loads(s)",
        "start_line": "10",
        "end_line": "11",
        "start_byte": "200",
        "end_byte": "245",
    }
    payload.update(overrides)
    return {k: v for k, v in payload.items() if v is not None}


def make_candidate(vector, score: float = 0.5, **payload) -> RawCandidate:
    return RawCandidate(score=score, payload=make_payload(**payload), vector=vector)


class FakeIndex:
    def __init__(self, candidates: Optional[List[RawCandidate]] = None, dim: Optional[int] = None,
                 error: Optional[Exception] = None):
        self.candidates = candidates or []
        self.dim = dim
        self.error = error
        self.calls = []

    def search(self, query_vector, limit, filters=None):
        self.calls.append({"vector": list(query_vector), "limit": limit, "filters": filters})
        if self.error is not None:
            raise self.error
        return self.candidates[:limit]


class FakeEmbedder:
    def __init__(self, vector=None, error: Optional[Exception] = None):
        self.vector = vector if vector is not None else [1.0, 0.0, 0.0, 0.0]
        self.error = error
        self.calls: List[str] = []

    def embed(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return list(self.vector)


@pytest.fixture
def fake_index():
    return FakeIndex()


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def semantic(fake_index, fake_embedder):
    return Semantic(index=fake_index, embedder=fake_embedder)
