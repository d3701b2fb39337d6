"""FastAPI application setup for Semantic Recall."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from semantic_recall.api.dependencies import (
    get_app_settings,
    get_database,
    get_query_service,
    get_worker_pool,
)
from semantic_recall.api.routes_admin import router as admin_router
from semantic_recall.api.routes_content import router as content_router
from semantic_recall.api.routes_query import router as query_router
from semantic_recall.core.errors import RateLimited, RecallError
from semantic_recall.core.logging import configure_logging, get_logger
from semantic_recall.core.metrics import REQUEST_COUNT

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Warm up core singletons and run the index workers for the app's lifetime."""
    get_app_settings()
    get_database()
    get_query_service()
    workers = get_worker_pool()
    workers.start()
    try:
        yield
    finally:
        workers.stop()


app = FastAPI(
    title="Semantic Recall",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"^(chrome-extension://.*|http://(localhost|127\.0\.0\.1)(:\d+)?)$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(content_router, prefix="/content", tags=["content"])
app.include_router(query_router, prefix="", tags=["query"])
app.include_router(admin_router, prefix="", tags=["admin"])


@app.middleware("http")
async def count_requests(request: Request, call_next):
    response = await call_next(request)
    route = request.scope.get("route")
    endpoint = getattr(route, "path", "unmatched")
    REQUEST_COUNT.labels(endpoint=endpoint, method=request.method, status=str(response.status_code)).inc()
    return response


@app.exception_handler(RecallError)
async def handle_recall_error(request: Request, exc: RecallError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers: dict[str, str] = {}
    if isinstance(exc, RateLimited) and exc.retry_after is not None:
        headers["Retry-After"] = str(int(exc.retry_after))
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)
