"""FastAPI application entry point.

Word Category API - generated word categories for word-game clients.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wordapi.errors import InvalidCategoryInput, StoreNotReady, WordApiError
from wordapi.routes import api_router
from wordapi.schemas import ErrorResponse
from wordapi.services.gateway import CategoryGateway
from wordapi.services.providers import ProviderChain, build_provider_chain
from wordapi.services.refresh import RefreshController, RefreshPolicy
from wordapi.settings import Settings, get_settings
from wordapi.stores.categories import CategoryStore
from wordapi.stores.postgres import Database
from wordapi.stores.redis import RedisLocks

logger = logging.getLogger("uvicorn.error")


def _error_response(status_code: int, code: str, message: str, detail: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse.build(code, message, detail).model_dump(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Warms the store connection on startup. Failure is not fatal: the store
    connects lazily and requests get 503 until it is reachable.
    """
    store: CategoryStore = app.state.store
    try:
        await store.connect()
    except StoreNotReady:
        logger.exception("Postgres init failed; will retry on first request")

    yield

    # Shutdown
    locks: RedisLocks | None = app.state.locks
    if locks is not None:
        await locks.close()
    await store.close()


def create_app(
    settings: Settings | None = None,
    *,
    store: CategoryStore | None = None,
    chain: ProviderChain | None = None,
    locks: RedisLocks | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Collaborators default to the real Postgres/provider/Redis implementations
    built from settings; tests pass fakes.
    """
    settings = settings or get_settings()

    if store is None:
        store = CategoryStore(Database.from_settings(settings))
    if chain is None:
        chain = build_provider_chain(settings)
    if locks is None and settings.refresh_lock_enabled:
        locks = RedisLocks.from_settings(settings)

    refresher = RefreshController(
        store,
        chain,
        RefreshPolicy.from_settings(settings),
        lock=locks,
        lock_ttl=settings.refresh_lock_ttl_seconds,
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Generated word categories with provider fallback",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.locks = locks
    app.state.gateway = CategoryGateway(store, refresher)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(WordApiError)
    async def word_api_error_handler(request: Request, exc: WordApiError) -> JSONResponse:
        """Domain errors: 400 / 409 / 503."""
        return _error_response(exc.status_code, exc.code, exc.message, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed request bodies are client errors (400), like InvalidCategoryInput."""
        errors = [{"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", "")} for e in exc.errors()]
        return _error_response(
            InvalidCategoryInput.status_code,
            InvalidCategoryInput.code,
            "Invalid categoryName or words array",
            {"errors": errors},
        )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(
            500,
            "INTERNAL_ERROR",
            str(exc) if settings.debug else "Internal server error",
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "wordapi.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
