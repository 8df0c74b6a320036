# Local vector index: a FAISS file plus a JSONL payload sidecar whose line N
# holds the payload of index row N. Vectors are L2-normalized, so inner
# product scores are cosine similarities.

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import faiss
import numpy as np

from codesearch.search.types import RawCandidate


def default_payloads_path(faiss_path: str) -> Path:
    return Path(faiss_path).with_suffix(".payloads.jsonl")


def matches_filters(payload: Dict[str, object], filters: Dict[str, List[str]]) -> bool:
    for key, wanted in filters.items():
        value = payload.get(key)
        if not isinstance(value, str):
            return False
        if key == "relative_path":
            if not any(value.startswith(p) for p in wanted):
                return False
        elif value not in wanted:
            return False
    return True


class FaissIndex:
    def __init__(self, faiss_path: str, payloads_path: Optional[str] = None):
        self.faiss_path = faiss_path
        self.payloads_path = Path(payloads_path) if payloads_path else default_payloads_path(faiss_path)

        self._lock = threading.Lock()
        self._index: Optional[faiss.Index] = None
        self._payloads: Optional[List[Dict[str, object]]] = None

    # -------------------------
    # Loaders
    # -------------------------
    def load(self) -> faiss.Index:
        with self._lock:
            if self._index is None:
                index = faiss.read_index(self.faiss_path)
                payloads = self._read_payloads()
                if index.ntotal != len(payloads):
                    raise RuntimeError(
                        f"Index size ({index.ntotal}) != payload count ({len(payloads)}) in {self.payloads_path}"
                    )
                self._payloads = payloads
                self._index = index
        return self._index

    def _read_payloads(self) -> List[Dict[str, object]]:
        out: List[Dict[str, object]] = []
        with self.payloads_path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    out.append(json.loads(line))
        return out

    @property
    def dim(self) -> int:
        return self.load().d

    # -------------------------
    # Search
    # -------------------------
    def search(self, query_vector: Sequence[float], limit: int,
               filters: Optional[Dict[str, List[str]]] = None) -> List[RawCandidate]:
        index = self.load()
        if limit <= 0 or index.ntotal == 0:
            return []

        q = np.array(query_vector, dtype=np.float32).reshape(1, -1)
        if q.shape[1] != index.d:
            raise ValueError(f"Query dim {q.shape[1]} != index dim {index.d}")
        faiss.normalize_L2(q)

        # with filters the whole index is scanned so filtering can't starve the result
        k = index.ntotal if filters else min(limit, index.ntotal)
        D, I = index.search(q, k)

        out: List[RawCandidate] = []
        for score, row in zip(D[0].tolist(), I[0].tolist()):
            if row < 0:
                continue
            payload = self._payloads[row]
            if filters and not matches_filters(payload, filters):
                continue
            out.append(
                RawCandidate(
                    score=float(score),
                    payload=dict(payload),
                    vector=index.reconstruct(int(row)).tolist(),
                )
            )
            if len(out) == limit:
                break
        return out
