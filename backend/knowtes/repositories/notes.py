from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from knowtes.models import Note, utcnow


class NoteRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, user_id: uuid.UUID, note_id: uuid.UUID) -> Note | None:
        result = await self.db.execute(
            select(Note).where(Note.id == note_id, Note.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_for_topic(
        self,
        user_id: uuid.UUID,
        topic_id: uuid.UUID,
        *,
        is_summary: bool | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Note], int]:
        """Return one page of a topic's notes (newest first) and the total."""
        conditions = [Note.user_id == user_id, Note.topic_id == topic_id]
        if is_summary is not None:
            conditions.append(Note.is_summary.is_(is_summary))

        total = await self.db.scalar(select(func.count()).select_from(Note).where(*conditions))
        result = await self.db.execute(
            select(Note)
            .where(*conditions)
            .order_by(Note.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def list_source_notes(self, user_id: uuid.UUID, topic_id: uuid.UUID) -> list[Note]:
        """All non-summary notes of a topic, oldest first."""
        result = await self.db.execute(
            select(Note)
            .where(
                Note.user_id == user_id,
                Note.topic_id == topic_id,
                Note.is_summary.is_(False),
            )
            .order_by(Note.created_at)
        )
        return list(result.scalars().all())

    async def create(
        self,
        user_id: uuid.UUID,
        topic_id: uuid.UUID,
        *,
        title: str,
        content: str,
        is_summary: bool = False,
    ) -> Note:
        note = Note(
            user_id=user_id,
            topic_id=topic_id,
            title=title,
            content=content,
            is_summary=is_summary,
        )
        self.db.add(note)
        await self.db.flush()
        await self.db.refresh(note)
        return note

    async def update(
        self,
        note: Note,
        *,
        title: str | None = None,
        content: str | None = None,
    ) -> Note:
        if title is not None:
            note.title = title
        if content is not None:
            note.content = content
        note.updated_at = utcnow()
        await self.db.flush()
        await self.db.refresh(note)
        return note

    async def delete(self, note: Note) -> None:
        await self.db.delete(note)
        await self.db.flush()
