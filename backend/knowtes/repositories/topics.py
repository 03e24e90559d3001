from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from knowtes.models import Topic, utcnow


class TopicRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, user_id: uuid.UUID, topic_id: uuid.UUID) -> Topic | None:
        result = await self.db.execute(
            select(Topic).where(Topic.id == topic_id, Topic.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        *,
        parent_id: uuid.UUID | None = None,
        root_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Topic], int]:
        """Return one page of the user's topics (newest first) and the total.

        ``parent_id`` restricts the page to direct children of that topic;
        ``root_only`` to topics without a parent.
        """
        conditions = [Topic.user_id == user_id]
        if parent_id is not None:
            conditions.append(Topic.parent_id == parent_id)
        elif root_only:
            conditions.append(Topic.parent_id.is_(None))

        total = await self.db.scalar(select(func.count()).select_from(Topic).where(*conditions))
        result = await self.db.execute(
            select(Topic)
            .where(*conditions)
            .order_by(Topic.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def create(
        self,
        user_id: uuid.UUID,
        title: str,
        parent_id: uuid.UUID | None = None,
    ) -> Topic:
        topic = Topic(user_id=user_id, title=title, parent_id=parent_id)
        self.db.add(topic)
        await self.db.flush()
        await self.db.refresh(topic)
        return topic

    async def update(self, topic: Topic, *, title: str) -> Topic:
        topic.title = title
        topic.updated_at = utcnow()
        await self.db.flush()
        await self.db.refresh(topic)
        return topic

    async def delete(self, topic: Topic) -> None:
        await self.db.delete(topic)
        await self.db.flush()
