"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Per-instance state lives on app.state:

- broadcaster:     the live-update subscriber registry (one per app)
- memory_storage:  the MemoryStorage instance, or None when the
                   database backend is active

Lifespan handles startup seeding, cancelling in-flight live sends and
engine disposal.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agora import __version__
from agora.api import api_router
from agora.api.errors import register_exception_handlers
from agora.config import settings
from agora.realtime.broadcaster import Broadcaster
from agora.storage import DatabaseStorage, MemoryStorage

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` at shutdown.
    """
    memory = app.state.memory_storage
    logger.info(
        "agora.starting",
        version=__version__,
        environment=settings.environment,
        storage="memory" if memory is not None else "database",
        port=settings.port,
    )

    if settings.seed_sample_data:
        from agora.sample_data import seed_storage

        if memory is not None:
            await seed_storage(memory)
        else:
            from agora.db.engine import async_session_factory

            async with async_session_factory() as session:
                await seed_storage(DatabaseStorage(session))

    yield

    logger.info(
        "agora.shutdown",
        subscribers=app.state.broadcaster.subscriber_count,
    )
    await app.state.broadcaster.close()

    if memory is None:
        from agora.db.engine import engine

        await engine.dispose()


def create_app(storage_backend: Optional[str] = None) -> FastAPI:
    """Build and return the FastAPI application.

    storage_backend overrides AGORA_STORAGE_BACKEND ("database" or "memory").
    """
    backend = storage_backend or settings.storage_backend
    if backend not in ("database", "memory"):
        raise ValueError(f"Unknown storage backend: {backend!r}")

    app = FastAPI(
        title="Agora",
        description="Discussion forum — questions, answers, likes, live updates",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.broadcaster = Broadcaster()
    app.state.memory_storage = MemoryStorage() if backend == "memory" else None

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → CORS → handler

    from agora.middleware.request_id import RequestIdMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router)

    from agora.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: agora.main:app)
app = create_app()
