"""
Content Store - Main Application

FastAPI application serving the JSON admin API for the content store.

The store is built from an explicit ``StoreConfig`` and opened/closed by the
application lifespan; nothing store-related lives in module globals.
"""

import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from content_store.auth import Capability, allow_principals
from content_store.config import (
    APP_ENV,
    APP_HOST,
    APP_PORT,
    APP_VERSION,
    DEBUG,
    StoreConfig,
)
from content_store.database import StorageBackend
from content_store.errors import (
    ContentStoreError,
    DuplicateItemName,
    EmptyContainer,
    InvalidName,
    ItemNotFound,
    OrderMismatch,
    StorageFailure,
)
from content_store.routes.api import router as api_router
from content_store.store import ContentStore

LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"

# Error kind -> HTTP status for the admin API
ERROR_STATUS = {
    ItemNotFound: 404,
    EmptyContainer: 404,
    OrderMismatch: 409,
    DuplicateItemName: 409,
    InvalidName: 422,
    StorageFailure: 503,
}


# ---------------------------------------------------------------------------
# Logging setup: stdout only
# ---------------------------------------------------------------------------
def setup_logging(level: str) -> None:
    """Replace loguru's default handler with the stdout sink."""
    logger.remove()
    logger.add(sys.stdout, level=level, format=LOG_FORMAT, colorize=True)


def error_status(exc: ContentStoreError) -> int:
    for kind, status in ERROR_STATUS.items():
        if isinstance(exc, kind):
            return status
    return 500


async def content_store_error_handler(request: Request, exc: ContentStoreError):
    """Map store error kinds to JSON error responses."""
    status = error_status(exc)
    if status >= 500:
        logger.error("❌ {} {} failed: {}", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    On startup the store is opened (directories, schema, migrations); on
    shutdown it is closed.
    """
    store: ContentStore = app.state.store

    # --- Startup ---
    logger.info("🚀 Starting Content Store v{}", APP_VERSION)
    logger.info("📋 Environment: {} | Debug: {}", APP_ENV, DEBUG)
    try:
        store.open()
    except Exception as e:
        logger.critical("❌ Store initialization failed: {}", e)
        raise
    logger.success("✅ Application ready")

    yield

    # --- Shutdown ---
    logger.info("🛑 Shutting down Content Store …")
    store.close()
    logger.info("👋 Shutdown complete")


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------
def create_app(
    config: Optional[StoreConfig] = None,
    capability: Optional[Capability] = None,
    backend: Optional[StorageBackend] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or StoreConfig.from_env()
    setup_logging(config.log_level)

    app = FastAPI(
        title="Content Store",
        description="Priority-ordered content containers with an admin JSON API.",
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
    )
    app.state.config = config
    app.state.store = ContentStore(config, backend=backend)
    app.state.capability = capability or allow_principals(config.admin_principals)

    app.add_exception_handler(ContentStoreError, content_store_error_handler)

    # ------------------------------------------------------------------
    # Request logging middleware
    # ------------------------------------------------------------------
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every incoming HTTP request with timing information."""
        start = time.time()
        response = await call_next(request)
        duration = round(time.time() - start, 3)
        status = response.status_code

        if status >= 500:
            log = logger.error
        elif status >= 400:
            log = logger.warning
        else:
            log = logger.info
        log(
            "📤 {method} {path} -> {status} [{duration}s]",
            method=request.method,
            path=request.url.path,
            status=status,
            duration=duration,
        )
        return response

    app.include_router(api_router)  # /api/*  JSON endpoints

    return app


# ---------------------------------------------------------------------------
# Direct execution (development)
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "content_store.main:create_app",
        factory=True,
        host=APP_HOST,
        port=APP_PORT,
        reload=DEBUG,
        log_level="debug" if DEBUG else "info",
    )
