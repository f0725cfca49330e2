"""Catalog admin API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalogadmin.api.categories import router as categories_router
from catalogadmin.api.health import router as health_router
from catalogadmin.api.imports import router as imports_router
from catalogadmin.api.middleware import setup_middleware
from catalogadmin.api.preferences import router as preferences_router
from catalogadmin.api.products import router as products_router
from catalogadmin.catalog.service import CatalogService
from catalogadmin.infrastructure.config import Settings, settings
from catalogadmin.infrastructure.logging_config import configure_logging
from catalogadmin.infrastructure.sql_store import SqlDocumentStore
from catalogadmin.infrastructure.store import DocumentStore, InMemoryDocumentStore

logger = structlog.get_logger()


async def build_store(config: Settings) -> DocumentStore:
    """Create the document store selected by ``store_backend``.

    Args:
        config: Application settings.

    Returns:
        Ready-to-use store client.
    """
    if config.store_backend == "memory":
        return InMemoryDocumentStore()

    store = SqlDocumentStore.from_url(config.database_url, echo=config.debug)
    await store.create_schema()
    return store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting catalog admin API",
        version=settings.api_version,
        debug=settings.debug,
        store_backend=settings.store_backend,
    )

    owned_store: DocumentStore | None = None
    if getattr(app.state, "catalog", None) is None:
        owned_store = await build_store(settings)
        app.state.catalog = CatalogService(owned_store, settings)

    yield

    logger.info("Shutting down catalog admin API")
    if owned_store is not None:
        await owned_store.close()


# ============================================================================
# Exception Handlers
# ============================================================================


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": [],
            "request_id": request_id,
        },
    )


# ============================================================================
# Application
# ============================================================================


def create_app(service: CatalogService | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        service: Prebuilt catalog service. When omitted, startup builds one
            from settings and closes its store on shutdown.

    Returns:
        Configured application.
    """
    configure_logging(settings.log_level, json_output=settings.log_json)

    application = FastAPI(
        title="Catalog Admin API",
        description="Food product catalog administration backend",
        version=settings.api_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    application.state.catalog = service

    # CORS middleware (must be added before custom middleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID, error handling and domain error mapping
    setup_middleware(application)

    application.add_exception_handler(HTTPException, http_exception_handler)
    application.add_exception_handler(Exception, generic_exception_handler)

    application.include_router(health_router, tags=["Health"])
    application.include_router(products_router)
    application.include_router(preferences_router)
    application.include_router(categories_router)
    application.include_router(imports_router)

    return application


app = create_app()
