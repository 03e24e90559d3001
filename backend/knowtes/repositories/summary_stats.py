from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from knowtes.models import SummaryStat


class SummaryStatRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, user_id: uuid.UUID, stat_id: uuid.UUID) -> SummaryStat | None:
        result = await self.db.execute(
            select(SummaryStat).where(SummaryStat.id == stat_id, SummaryStat.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_for_topic(
        self,
        user_id: uuid.UUID,
        topic_id: uuid.UUID,
        *,
        accepted: bool | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[SummaryStat], int]:
        conditions = [SummaryStat.user_id == user_id, SummaryStat.topic_id == topic_id]
        if accepted is not None:
            conditions.append(SummaryStat.accepted.is_(accepted))

        total = await self.db.scalar(
            select(func.count()).select_from(SummaryStat).where(*conditions)
        )
        result = await self.db.execute(
            select(SummaryStat)
            .where(*conditions)
            .order_by(SummaryStat.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def create_pending(self, user_id: uuid.UUID, topic_id: uuid.UUID) -> SummaryStat:
        stat = SummaryStat(user_id=user_id, topic_id=topic_id, accepted=False, summary_note_id=None)
        self.db.add(stat)
        await self.db.flush()
        await self.db.refresh(stat)
        return stat

    async def mark_accepted(self, stat: SummaryStat, note_id: uuid.UUID) -> SummaryStat:
        stat.accepted = True
        stat.summary_note_id = note_id
        await self.db.flush()
        return stat

    async def delete(self, stat: SummaryStat) -> None:
        await self.db.delete(stat)
        await self.db.flush()
