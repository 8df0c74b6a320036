# Query embedders. Both expose embed(text) -> list[float] (L2-normalized)
# and raise EmbeddingError on any backend failure.

from __future__ import annotations

import os
from typing import List, Optional

import numpy as np
import requests

from codesearch.errors import EmbeddingError

os.environ.setdefault("TOKENIZERS_PARALLELISM", "false")


def _l2_normalize(vec: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    return vec / max(float(np.linalg.norm(vec)), eps)


class OllamaEmbedder:
    """Embeds text through Ollama's /api/embeddings endpoint."""

    def __init__(self, host: str = "http://localhost:11434", model: str = "bge-m3:latest", timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.host = host.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def embed(self, text: str) -> List[float]:
        url = f"{self.host}/api/embeddings"
        try:
            resp = self.session.post(url, json={"model": self.model, "prompt": text}, timeout=self.timeout)
            resp.raise_for_status()
            vec = np.array(resp.json()["embedding"], dtype="float32")
        except (requests.RequestException, KeyError, TypeError, ValueError) as e:
            raise EmbeddingError(f"ollama embedding failed ({self.model}): {e}") from e
        if vec.ndim != 1 or vec.size == 0:
            raise EmbeddingError(f"ollama returned an empty embedding for model {self.model}")
        return _l2_normalize(vec).tolist()


class SentenceTransformerEmbedder:
    """Local sentence-transformers model, loaded on first use."""

    def __init__(self, model_name: str = "BAAI/bge-small-en-v1.5", device: str = "cpu"):
        self.model_name = model_name
        self.device = device
        self._model = None

    def _get_model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer  # heavy import delayed

            self._model = SentenceTransformer(self.model_name, device=self.device)
        return self._model

    def embed_many(self, texts: List[str], batch_size: int = 64) -> np.ndarray:
        if not texts:
            return np.empty((0, 0), dtype=np.float32)
        try:
            vecs = self._get_model().encode(
                texts,
                batch_size=min(batch_size, len(texts)),
                convert_to_numpy=True,
                normalize_embeddings=True,
                show_progress_bar=False,
            )
        except Exception as e:
            raise EmbeddingError(f"sentence-transformers embedding failed ({self.model_name}): {e}") from e
        return np.asarray(vecs, dtype=np.float32)

    def embed(self, text: str) -> List[float]:
        return self.embed_many([text])[0].tolist()
