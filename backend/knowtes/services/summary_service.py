"""AI summary lifecycle for a topic.

A summary attempt is tracked by a ``SummaryStat`` row:

    none --generate--> pending --accept--> accepted
                               --reject--> (deleted)

``generate`` returns a draft without persisting a note. ``accept`` turns
the (possibly edited) draft into a summary note and marks the attempt
accepted in a single transaction. ``reject`` deletes the attempt.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from knowtes.completion import OpenRouterClient
from knowtes.completion.prompts.summary import format_note
from knowtes.config import Settings, get_settings
from knowtes.errors import InternalError, InvalidStateError, NotFoundError, ValidationError
from knowtes.models import Note, SummaryStat, Topic
from knowtes.repositories import NoteRepository, SummaryStatRepository, TopicRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GeneratedSummary:
    summary_stat_id: uuid.UUID
    title: str
    content: str


@dataclass(slots=True)
class AcceptedSummary:
    summary_stat_id: uuid.UUID
    note: Note


class SummaryService:
    """Generate, accept, reject and list AI summaries of a topic's notes.

    Args:
        db: Session shared by the repositories; the service commits it.
        client: Completion client. ``None`` when no API key is configured,
            in which case ``generate`` fails and the rest still works.
        topics / notes / stats: Repository overrides, defaulting to the
            SQLAlchemy repositories bound to ``db``.
    """

    def __init__(
        self,
        db: AsyncSession,
        client: OpenRouterClient | None,
        *,
        topics: TopicRepository | None = None,
        notes: NoteRepository | None = None,
        stats: SummaryStatRepository | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._db = db
        self._client = client
        self._topics = topics or TopicRepository(db)
        self._notes = notes or NoteRepository(db)
        self._stats = stats or SummaryStatRepository(db)
        self._settings = settings or get_settings()

    # ------------------------------------------------------------------
    # generate
    # ------------------------------------------------------------------

    async def generate(self, user_id: uuid.UUID, topic_id: uuid.UUID) -> GeneratedSummary:
        """Create a pending attempt and ask the completion API for a draft.

        Raises:
            NotFoundError: Topic missing or not owned by the caller.
            InvalidStateError: The topic has no non-summary notes.
            UpstreamError: The completion call failed; the pending attempt
                has been deleted before the error is re-raised.
        """
        await self._get_topic(user_id, topic_id)

        notes = await self._notes.list_source_notes(user_id, topic_id)
        if not notes:
            raise InvalidStateError("No notes found to summarize")

        if self._client is None:
            raise InternalError("Summary generation is not configured")

        stat = await self._stats.create_pending(user_id, topic_id)
        await self._db.commit()
        logger.info("Generating summary %s for topic %s from %d notes", stat.id, topic_id, len(notes))

        try:
            draft = await self._client.generate_summary(
                [format_note(note.title, note.content) for note in notes],
                model=self._settings.summary_model,
                max_tokens=self._settings.SUMMARY_MAX_TOKENS,
                temperature=self._settings.SUMMARY_TEMPERATURE,
            )
        except BaseException:
            # includes CancelledError when the client disconnects mid-call
            await self._discard_attempt(stat)
            raise

        return GeneratedSummary(summary_stat_id=stat.id, title=draft.title, content=draft.content)

    async def _discard_attempt(self, stat: SummaryStat) -> None:
        """Delete the pending attempt left behind by a failed generation."""
        logger.warning("Summary generation %s failed, deleting pending attempt", stat.id)
        try:
            await self._stats.delete(stat)
            await self._db.commit()
        except SQLAlchemyError:
            logger.exception("Failed to delete pending summary attempt %s", stat.id)
            await self._db.rollback()

    # ------------------------------------------------------------------
    # accept / reject
    # ------------------------------------------------------------------

    async def accept(
        self,
        user_id: uuid.UUID,
        topic_id: uuid.UUID,
        summary_id: uuid.UUID,
        *,
        title: str,
        content: str,
    ) -> AcceptedSummary:
        """Materialise the summary note and mark the attempt accepted.

        The note insert and the attempt update are committed together;
        if either fails nothing is persisted.
        """
        stat = await self._get_pending(user_id, topic_id, summary_id)

        try:
            note = await self._notes.create(
                user_id,
                topic_id,
                title=title,
                content=content,
                is_summary=True,
            )
            await self._stats.mark_accepted(stat, note.id)
            await self._db.commit()
        except Exception:
            await self._db.rollback()
            raise

        logger.info("Accepted summary %s as note %s", stat.id, note.id)
        return AcceptedSummary(summary_stat_id=stat.id, note=note)

    async def reject(self, user_id: uuid.UUID, topic_id: uuid.UUID, summary_id: uuid.UUID) -> None:
        """Discard a pending attempt."""
        stat = await self._get_pending(user_id, topic_id, summary_id)
        await self._stats.delete(stat)
        await self._db.commit()
        logger.info("Rejected summary %s", summary_id)

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------

    async def list_for_topic(
        self,
        user_id: uuid.UUID,
        topic_id: uuid.UUID,
        *,
        accepted: bool | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[SummaryStat], int]:
        await self._get_topic(user_id, topic_id)
        return await self._stats.list_for_topic(
            user_id, topic_id, accepted=accepted, limit=limit, offset=offset
        )

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------

    async def _get_topic(self, user_id: uuid.UUID, topic_id: uuid.UUID) -> Topic:
        topic = await self._topics.get(user_id, topic_id)
        if topic is None:
            raise NotFoundError("Topic not found")
        return topic

    async def _get_pending(
        self,
        user_id: uuid.UUID,
        topic_id: uuid.UUID,
        summary_id: uuid.UUID,
    ) -> SummaryStat:
        await self._get_topic(user_id, topic_id)

        stat = await self._stats.get(user_id, summary_id)
        if stat is None:
            raise NotFoundError("Summary not found")
        if stat.topic_id != topic_id:
            raise ValidationError("Summary does not belong to this topic")
        if stat.accepted:
            raise InvalidStateError("Summary has already been accepted")
        return stat
