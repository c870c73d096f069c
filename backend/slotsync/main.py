"""
Slot Sync API - Main Application Entry Point

Keeps a local view of customers and hourly bookings in step with the remote
row store:
- Bulk load on startup with write-through to a Redis snapshot cache
- Cache fallback (read-only mode) when the remote store is unreachable
- Live change events folded in idempotently
- Strict-confirm commands with customer statistics maintenance
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from slotsync.core.config import get_settings
from slotsync.core.logging import setup_logging, get_logger
from slotsync.core.metrics import metrics_endpoint
from slotsync.api.router import api_router
from slotsync.api.middleware import RequestLoggingMiddleware
from slotsync.infrastructure.redis_client import close_redis
from slotsync.services.cache_service import get_local_cache
from slotsync.services.client_factory import get_remote_client
from slotsync.services.realtime_applier import RealtimeApplier
from slotsync.services.sync_coordinator import SyncCoordinator
from slotsync.store.state_store import StateStore

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        remote_backend=settings.REMOTE_BACKEND,
    )

    remote = get_remote_client()
    cache = get_local_cache()
    store = StateStore()
    coordinator = SyncCoordinator(store, remote, cache)
    applier = RealtimeApplier(store)

    app.state.store = store
    app.state.coordinator = coordinator

    result = await coordinator.bootstrap()
    if not result.has_data:
        logger.warning("no_data_available", error_kind=result.error.value if result.error else None)

    detach = await applier.attach(remote)

    yield

    # Cleanup
    await detach()
    await remote.close()
    await cache.close()
    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Customer and time-slot booking state kept in sync with a remote store",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom middleware
app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    store = getattr(app.state, "store", None)
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "store": store.status().model_dump() if store else None,
    }


@app.get("/metrics", include_in_schema=False)
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
