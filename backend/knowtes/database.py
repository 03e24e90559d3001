"""SQLAlchemy 2.x async engine and session factory."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from knowtes.config import get_settings


def build_engine(url: str) -> AsyncEngine:
    return create_async_engine(url, echo=False, pool_pre_ping=True)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Rows stay readable after commit so routes can serialize them.
    return async_sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(get_settings().async_database_url)
async_session_factory = build_session_factory(engine)


class Base(DeclarativeBase):
    """Declarative base shared by users, topics, notes and summary_stats."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield one session per request.

    Routes and ``SummaryService`` commit their own writes. Whatever is still
    pending when the handler returns is committed here, and everything is
    rolled back if it raises.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
