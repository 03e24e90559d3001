"""Shared FastAPI dependencies.

Repositories and services are built per request from the request session,
so tests can swap any of them through ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from knowtes.completion import OpenRouterClient
from knowtes.config import get_settings
from knowtes.database import get_db
from knowtes.repositories import NoteRepository, SummaryStatRepository, TopicRepository
from knowtes.services.auth_service import get_current_user
from knowtes.services.summary_service import SummaryService

logger = logging.getLogger(__name__)

DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[dict, Depends(get_current_user)]


def get_topic_repository(db: DbSession) -> TopicRepository:
    return TopicRepository(db)


def get_note_repository(db: DbSession) -> NoteRepository:
    return NoteRepository(db)


def get_summary_stat_repository(db: DbSession) -> SummaryStatRepository:
    return SummaryStatRepository(db)


Topics = Annotated[TopicRepository, Depends(get_topic_repository)]
Notes = Annotated[NoteRepository, Depends(get_note_repository)]
SummaryStats = Annotated[SummaryStatRepository, Depends(get_summary_stat_repository)]

# ---------------------------------------------------------------------------
# Singleton completion client (lazy initialization)
# ---------------------------------------------------------------------------

_completion_client: OpenRouterClient | None = None


def get_completion_client() -> OpenRouterClient | None:
    """Return the process-wide completion client.

    Lazily created on first call. Returns None while no
    ``OPENROUTER_API_KEY`` is configured.
    """
    global _completion_client  # noqa: PLW0603
    if _completion_client is None:
        settings = get_settings()
        if not settings.OPENROUTER_API_KEY:
            logger.warning("OPENROUTER_API_KEY is not set; summary generation is disabled")
            return None
        _completion_client = OpenRouterClient(
            settings.OPENROUTER_API_KEY,
            base_url=settings.OPENROUTER_BASE_URL,
            default_model=settings.OPENROUTER_DEFAULT_MODEL,
            default_timeout_ms=settings.OPENROUTER_TIMEOUT_MS,
            referer=settings.OPENROUTER_REFERER,
            app_title=settings.OPENROUTER_APP_TITLE,
        )
    return _completion_client


async def close_completion_client() -> None:
    """Close and forget the completion client (application shutdown)."""
    global _completion_client  # noqa: PLW0603
    if _completion_client is not None:
        await _completion_client.aclose()
        _completion_client = None


def get_summary_service(
    db: DbSession,
    topics: Topics,
    notes: Notes,
    stats: SummaryStats,
    client: Annotated[OpenRouterClient | None, Depends(get_completion_client)],
) -> SummaryService:
    return SummaryService(db, client, topics=topics, notes=notes, stats=stats)


Summaries = Annotated[SummaryService, Depends(get_summary_service)]
