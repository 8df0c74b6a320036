# CLI to build a local FAISS index + payload sidecar from a JSONL file of
# snippets. Each input line is one object carrying the payload keys the
# search decoder expects; numeric fields may be ints or digit strings.
# ------------------------------------------------------------------------------

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

import faiss
import numpy as np

from codesearch.log import configure_logging
from codesearch.errors import DecodeError
from codesearch.search.decode import NUMERIC_FIELDS, REQUIRED_FIELDS, decode_payload
from codesearch.semantic import build_embedder
from codesearch.semantic.faiss_index import default_payloads_path
from codesearch.settings import settings

logger = logging.getLogger(__name__)


# ==============================================================
# === Input ====================================================
# ==============================================================

def normalize_row(row: Dict[str, object], lineno: int) -> Dict[str, object]:
    """
    Check a row against the same rules the search decoder applies, so a
    row that could not be decoded at query time never reaches the index.
    Integer numeric fields are stored as digit strings.
    """
    missing = [k for k in REQUIRED_FIELDS if k not in row]
    if missing:
        raise ValueError(f"line {lineno}: missing keys {missing}")
    out = dict(row)
    for k in NUMERIC_FIELDS:
        if isinstance(out[k], int) and not isinstance(out[k], bool):
            out[k] = str(out[k])
    try:
        decode_payload(out)
    except DecodeError as e:
        raise ValueError(f"line {lineno}: {e}") from e
    return out


def load_snippet_rows(path: Path) -> List[Dict[str, object]]:
    rows: List[Dict[str, object]] = []
    with path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            rows.append(normalize_row(json.loads(line), lineno))
    return rows


# ==============================================================
# === Embedding + output =======================================
# ==============================================================

def embed_rows(rows: List[Dict[str, object]], embedder, batch_size: int = 64) -> np.ndarray:
    texts = [r["snippet"] for r in rows]
    if hasattr(embedder, "embed_many"):
        embs = embedder.embed_many(texts, batch_size=batch_size)
    else:
        t0 = time.time()
        vecs = []
        for i, text in enumerate(texts, start=1):
            vecs.append(embedder.embed(text))
            if i % 1000 == 0:
                logger.info("embedded %d/%d snippets (%.1f/s)", i, len(texts), i / max(time.time() - t0, 1e-6))
        embs = np.array(vecs, dtype=np.float32)
    return np.ascontiguousarray(embs, dtype=np.float32)


def write_index(embs: np.ndarray, rows: List[Dict[str, object]], faiss_path: Path,
                payloads_path: Optional[Path] = None) -> Path:
    """
    Persist an IndexFlatIP over L2-normalized rows (inner product == cosine)
    and the JSONL payload sidecar, one line per index row.
    """
    if embs.ndim != 2 or embs.shape[0] != len(rows):
        raise ValueError(f"embeddings shape {embs.shape} does not match {len(rows)} rows")
    payloads_path = payloads_path or default_payloads_path(str(faiss_path))
    faiss_path.parent.mkdir(parents=True, exist_ok=True)

    embs = np.ascontiguousarray(embs, dtype=np.float32).copy()
    faiss.normalize_L2(embs)
    index = faiss.IndexFlatIP(embs.shape[1])
    index.add(embs)
    faiss.write_index(index, str(faiss_path))

    with payloads_path.open("w", encoding="utf-8") as f:
        for row in rows:
            f.write(json.dumps(row, ensure_ascii=False) + "\n")

    logger.info("saved FAISS index %s (ntotal=%d) and payloads %s", faiss_path, index.ntotal, payloads_path)
    return payloads_path


# ==============================================================
# === Main =====================================================
# ==============================================================

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Build a FAISS snippet index from JSONL")
    ap.add_argument("--input", required=True, help="JSONL file, one snippet payload per line")
    ap.add_argument("--faiss", required=True, help="Output FAISS index path")
    ap.add_argument("--payloads", help="Output payload sidecar (default: <faiss>.payloads.jsonl)")
    ap.add_argument("--batch-size", type=int, default=64)
    args = ap.parse_args(argv)

    configure_logging(settings.LOG_LEVEL)

    try:
        rows = load_snippet_rows(Path(args.input))
    except (OSError, ValueError) as e:
        logger.error("cannot read %s: %s", args.input, e)
        return 1
    if not rows:
        logger.info("nothing to index")
        return 0

    logger.info("embedding %d snippets with %s (%s)", len(rows), settings.EMBED_BACKEND, settings.EMBED_MODEL)
    embs = embed_rows(rows, build_embedder(settings), batch_size=args.batch_size)
    write_index(embs, rows, Path(args.faiss), Path(args.payloads) if args.payloads else None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
