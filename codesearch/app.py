# ============================================================
# Code Search FastAPI App
# ------------------------------------------------------------
# This app wires everything together:
#   - Semantic capability (vector index + embedder) from settings
#   - Search pipeline: parse -> embed -> retrieve -> dedupe
#   - Structured {kind, message} errors
# ============================================================

from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

# --- Local imports ---
from codesearch.errors import ErrorKind, SearchError
from codesearch.log import configure_logging
from codesearch.search import SearchPipeline
from codesearch.semantic import Semantic, build_semantic
from codesearch.settings import settings

configure_logging(settings.LOG_LEVEL)

# ------------------------------------------------------------
# 🔧 Semantic capability + pipeline
# ------------------------------------------------------------
@lru_cache(maxsize=1)
def get_semantic() -> Optional[Semantic]:
    return build_semantic(settings)


def get_pipeline(semantic: Optional[Semantic] = Depends(get_semantic)) -> SearchPipeline:
    return SearchPipeline(
        semantic,
        overfetch_multiplier=settings.OVERFETCH_MULTIPLIER,
        dedup_threshold=settings.DEDUP_THRESHOLD,
        suppress_overlaps=settings.DEDUP_SUPPRESS_OVERLAPS,
    )

# ------------------------------------------------------------
# 🚀 FastAPI init
# ------------------------------------------------------------
app = FastAPI(title="Code Search API", version="0.1")

# ------------------------------------------------------------
# 📦 Pydantic models
# ------------------------------------------------------------
class SnippetModel(BaseModel):
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
    embedding: List[float]

class SemanticResponse(BaseModel):
    snippets: List[SnippetModel]

class EndpointError(BaseModel):
    kind: ErrorKind
    message: str

ERROR_STATUS = {
    ErrorKind.USER: 400,
    ErrorKind.INTERNAL: 500,
    ErrorKind.CONFIGURATION: 503,
}

@app.exception_handler(SearchError)
async def search_error_handler(request: Request, exc: SearchError) -> JSONResponse:
    body = EndpointError(kind=exc.kind, message=exc.message)
    return JSONResponse(status_code=ERROR_STATUS[exc.kind], content=body.model_dump(mode="json"))

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(f"{err['loc'][-1]}: {err['msg']}" for err in exc.errors())
    body = EndpointError(kind=ErrorKind.USER, message=f"invalid request: {problems}")
    return JSONResponse(status_code=ERROR_STATUS[ErrorKind.USER], content=body.model_dump(mode="json"))

# ------------------------------------------------------------
# 🔎 Semantic search route
# ------------------------------------------------------------
@app.get(
    "/semantic/chunks",
    response_model=SemanticResponse,
    responses={400: {"model": EndpointError}, 500: {"model": EndpointError}, 503: {"model": EndpointError}},
)
def raw_chunks(
    query: str = Query(..., description="Natural-language search query"),
    limit: int = Query(..., ge=0, description="Maximum number of snippets"),
    pipeline: SearchPipeline = Depends(get_pipeline),
):
    snippets = pipeline.run(query, limit)
    return {"snippets": [s.to_dict() for s in snippets]}

# ------------------------------------------------------------
# 🧭 Health checks
# ------------------------------------------------------------
@app.get("/healthz")
def healthz(semantic: Optional[Semantic] = Depends(get_semantic)):
    return {
        "ok": True,
        "env": settings.ENV,
        "debug": settings.DEBUG,
        "app": settings.app_name,
        "semantic_configured": semantic is not None,
    }

@app.get("/health")
def health():
    return {"status": "ok", "env": settings.ENV}

@app.get("/")
def hello():
    return {"message": "Code search service running."}
