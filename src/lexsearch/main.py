"""
lexsearch - FastAPI application serving TF-IDF search over a prebuilt index

Routes:
- GET  /, /index.html, /index.js   Static search page
- POST /api/search                  Raw UTF-8 body is the query
- GET  /health                      Liveness + index size

The index is loaded once at startup (or injected via create_app for tests)
and is read-only afterwards, so concurrent requests share it safely.

No app is built at import time. Run it with the app factory:
    uvicorn --factory lexsearch.main:create_app
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel, Field

from . import __version__
from .config import Settings, get_settings
from .errors import MalformedQuery
from .storage import IndexStore
from .tfidf.model import FrequencyModel
from .tfidf.scorer import rank

logger = logging.getLogger(__name__)

MAX_LIMIT = 100


# Request/Response models
class HealthResponse(BaseModel):
    status: str
    version: str
    documents: int
    started_at: str
    uptime_seconds: float


class SearchResultItem(BaseModel):
    doc_id: str = Field(..., description="Document identifier (file path)")
    score: float = Field(..., description="TF-IDF relevance score")


class SearchResponse(BaseModel):
    query: str
    results: List[SearchResultItem]
    total: int = Field(..., description="Number of ranked documents before truncation")


def decode_query(body: bytes) -> str:
    """
    Decode a raw request body into query text

    Raises:
        MalformedQuery: body is not valid UTF-8
    """
    try:
        return body.decode('utf-8')
    except UnicodeDecodeError as e:
        raise MalformedQuery(f"Body must be a valid UTF-8 string: {e}") from e


async def read_body(request: Request) -> bytes:
    return await request.body()


def create_app(model: Optional[FrequencyModel] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        model: Preloaded index; when None it is loaded from settings.index_path
            during startup
        settings: Runtime settings (default: get_settings())
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.model is None:
            app.state.model = IndexStore(settings.index_path).load()
        logger.info(f"Serving {app.state.model.document_count} documents")
        yield
        logger.info("Shutting down...")

    app = FastAPI(
        title="lexsearch",
        description="TF-IDF full-text search over a local document index",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.model = model
    app.state.settings = settings
    app.state.started_at = datetime.now(timezone.utc)
    app.state.started_monotonic = time.monotonic()

    def static_file(name: str, media_type: str) -> FileResponse:
        path = settings.static_dir / name
        if not path.is_file():
            logger.error(f"Could not serve file {path}: not found")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="404")
        return FileResponse(path, media_type=media_type)

    @app.get("/", include_in_schema=False)
    @app.get("/index.html", include_in_schema=False)
    async def index_page():
        return static_file("index.html", "text/html; charset=utf-8")

    @app.get("/index.js", include_in_schema=False)
    async def index_script():
        return static_file("index.js", "text/javascript; charset=utf-8")

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request):
        state = request.app.state
        return HealthResponse(
            status="healthy",
            version=__version__,
            documents=state.model.document_count if state.model is not None else 0,
            started_at=state.started_at.isoformat(),
            uptime_seconds=round(time.monotonic() - state.started_monotonic, 2),
        )

    @app.post("/api/search", response_model=SearchResponse)
    def search(
        request: Request,
        body: bytes = Depends(read_body),
        limit: Optional[int] = Query(default=None, ge=1, le=MAX_LIMIT, description="Maximum results"),
    ):
        query = decode_query(body)
        top_n = limit or settings.top_n

        ranked = rank(request.app.state.model, query)
        logger.debug(f"Query {query!r}: {len(ranked)} documents ranked")

        # Truncate after sorting: presentation only
        return SearchResponse(
            query=query,
            results=[SearchResultItem(doc_id=doc_id, score=value) for doc_id, value in ranked[:top_n]],
            total=len(ranked),
        )

    @app.exception_handler(MalformedQuery)
    async def malformed_query_handler(request: Request, exc: MalformedQuery):
        logger.warning(f"Rejected query: {exc}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Malformed query", "detail": str(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "detail": str(exc)},
        )

    return app

