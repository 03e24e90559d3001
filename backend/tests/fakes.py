"""In-memory stand-ins for the SQLAlchemy repositories.

They share one ``FakeStore`` so that cross-entity behavior (ownership
checks, deleting a topic with its notes and summary attempts) matches the
database without needing PostgreSQL.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

from knowtes.models import Note, SummaryStat, Topic


class FakeStore:
    def __init__(self) -> None:
        self.topics: dict[uuid.UUID, Topic] = {}
        self.notes: dict[uuid.UUID, Note] = {}
        self.stats: dict[uuid.UUID, SummaryStat] = {}
        self._clock = datetime(2026, 1, 1, tzinfo=UTC)

    def now(self) -> datetime:
        """Strictly increasing timestamps so ordering is deterministic."""
        self._clock += timedelta(seconds=1)
        return self._clock

    # -- seeding helpers ------------------------------------------------

    def add_topic(self, user_id, title="Topic", parent_id=None) -> Topic:
        now = self.now()
        topic = Topic(
            id=uuid.uuid4(),
            user_id=user_id,
            parent_id=parent_id,
            title=title,
            created_at=now,
            updated_at=now,
        )
        self.topics[topic.id] = topic
        return topic

    def add_note(self, user_id, topic_id, title="Note", content="", is_summary=False) -> Note:
        now = self.now()
        note = Note(
            id=uuid.uuid4(),
            user_id=user_id,
            topic_id=topic_id,
            title=title,
            content=content,
            is_summary=is_summary,
            created_at=now,
            updated_at=now,
        )
        self.notes[note.id] = note
        return note

    def add_stat(self, user_id, topic_id, accepted=False, summary_note_id=None) -> SummaryStat:
        stat = SummaryStat(
            id=uuid.uuid4(),
            user_id=user_id,
            topic_id=topic_id,
            accepted=accepted,
            summary_note_id=summary_note_id,
            created_at=self.now(),
        )
        self.stats[stat.id] = stat
        return stat


def _page(items, limit, offset):
    return items[offset : offset + limit], len(items)


class FakeTopicRepository:
    def __init__(self, store: FakeStore) -> None:
        self.store = store

    async def get(self, user_id, topic_id):
        topic = self.store.topics.get(topic_id)
        if topic is None or topic.user_id != user_id:
            return None
        return topic

    async def list_for_user(self, user_id, *, parent_id=None, root_only=False, limit=50, offset=0):
        items = [t for t in self.store.topics.values() if t.user_id == user_id]
        if parent_id is not None:
            items = [t for t in items if t.parent_id == parent_id]
        elif root_only:
            items = [t for t in items if t.parent_id is None]
        items.sort(key=lambda t: t.created_at, reverse=True)
        return _page(items, limit, offset)

    async def create(self, user_id, title, parent_id=None):
        return self.store.add_topic(user_id, title=title, parent_id=parent_id)

    async def update(self, topic, *, title):
        topic.title = title
        topic.updated_at = self.store.now()
        return topic

    async def delete(self, topic):
        doomed = {topic.id}
        changed = True
        while changed:
            children = {t.id for t in self.store.topics.values() if t.parent_id in doomed}
            changed = not children <= doomed
            doomed |= children
        for topic_id in doomed:
            del self.store.topics[topic_id]
        self.store.notes = {k: n for k, n in self.store.notes.items() if n.topic_id not in doomed}
        self.store.stats = {k: s for k, s in self.store.stats.items() if s.topic_id not in doomed}


class FakeNoteRepository:
    def __init__(self, store: FakeStore) -> None:
        self.store = store

    async def get(self, user_id, note_id):
        note = self.store.notes.get(note_id)
        if note is None or note.user_id != user_id:
            return None
        return note

    async def list_for_topic(self, user_id, topic_id, *, is_summary=None, limit=50, offset=0):
        items = [
            n
            for n in self.store.notes.values()
            if n.user_id == user_id and n.topic_id == topic_id
        ]
        if is_summary is not None:
            items = [n for n in items if n.is_summary is is_summary]
        items.sort(key=lambda n: n.created_at, reverse=True)
        return _page(items, limit, offset)

    async def list_source_notes(self, user_id, topic_id):
        items = [
            n
            for n in self.store.notes.values()
            if n.user_id == user_id and n.topic_id == topic_id and not n.is_summary
        ]
        return sorted(items, key=lambda n: n.created_at)

    async def create(self, user_id, topic_id, *, title, content, is_summary=False):
        return self.store.add_note(
            user_id, topic_id, title=title, content=content, is_summary=is_summary
        )

    async def update(self, note, *, title=None, content=None):
        if title is not None:
            note.title = title
        if content is not None:
            note.content = content
        note.updated_at = self.store.now()
        return note

    async def delete(self, note):
        del self.store.notes[note.id]
        for stat in self.store.stats.values():
            if stat.summary_note_id == note.id:
                stat.summary_note_id = None


class FakeSummaryStatRepository:
    def __init__(self, store: FakeStore) -> None:
        self.store = store

    async def get(self, user_id, stat_id):
        stat = self.store.stats.get(stat_id)
        if stat is None or stat.user_id != user_id:
            return None
        return stat

    async def list_for_topic(self, user_id, topic_id, *, accepted=None, limit=50, offset=0):
        items = [
            s
            for s in self.store.stats.values()
            if s.user_id == user_id and s.topic_id == topic_id
        ]
        if accepted is not None:
            items = [s for s in items if s.accepted is accepted]
        items.sort(key=lambda s: s.created_at, reverse=True)
        return _page(items, limit, offset)

    async def create_pending(self, user_id, topic_id):
        return self.store.add_stat(user_id, topic_id)

    async def mark_accepted(self, stat, note_id):
        stat.accepted = True
        stat.summary_note_id = note_id
        return stat

    async def delete(self, stat):
        del self.store.stats[stat.id]
