"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from knowtes import __version__
from knowtes.api.deps import close_completion_client
from knowtes.api.error_handlers import register_error_handlers
from knowtes.config import get_settings
from knowtes.database import engine

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown events."""
    logging.getLogger("knowtes").setLevel(settings.LOG_LEVEL.upper())

    # Startup: create all database tables if they don't exist
    from knowtes.database import Base
    from knowtes import models  # noqa: F401 - Import models to register them with Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield
    # Shutdown: close outbound HTTP client and the engine connection pool
    await close_completion_client()
    await engine.dispose()


app = FastAPI(
    title="Knowtes",
    description="Topic-organized notes with AI summaries",
    version=__version__,
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# --- Router includes ---
from knowtes.api.auth import router as auth_router  # noqa: E402
from knowtes.api.notes import router as notes_router  # noqa: E402
from knowtes.api.summaries import router as summaries_router  # noqa: E402
from knowtes.api.topics import router as topics_router  # noqa: E402

app.include_router(auth_router, prefix="/api")
app.include_router(topics_router, prefix="/api")
app.include_router(notes_router, prefix="/api")
app.include_router(summaries_router, prefix="/api")


@app.get("/api/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns a simple status response to verify the API is running.
    """
    return {"status": "ok"}
