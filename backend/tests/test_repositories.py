"""Tests for the SQLAlchemy repositories against PostgreSQL.

Covers:
- per-user scoping of every lookup and listing
- parent / root_only / is_summary / accepted filters and page totals
- ON DELETE CASCADE from topics, ON DELETE SET NULL from summary notes
- SummaryService.accept committing or rolling back as one transaction
"""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError


async def _make_user(db, email: str | None = None):
    from knowtes.models import User

    user = User(email=email or f"{uuid.uuid4().hex}@example.com", password_hash="x")
    db.add(user)
    await db.flush()
    return user


async def _count(db, model, *conditions) -> int:
    return await db.scalar(select(func.count()).select_from(model).where(*conditions))


class TestTopicRepository:
    @pytest.mark.asyncio
    async def test_get_is_scoped_to_owner(self, test_db):
        from knowtes.repositories import TopicRepository

        owner = await _make_user(test_db)
        other = await _make_user(test_db)
        repo = TopicRepository(test_db)
        topic = await repo.create(owner.id, "Recipes")

        assert (await repo.get(owner.id, topic.id)).title == "Recipes"
        assert await repo.get(other.id, topic.id) is None

    @pytest.mark.asyncio
    async def test_list_filters_and_total(self, test_db):
        from knowtes.repositories import TopicRepository

        owner = await _make_user(test_db)
        other = await _make_user(test_db)
        repo = TopicRepository(test_db)
        recipes = await repo.create(owner.id, "Recipes")
        await repo.create(owner.id, "Pasta", parent_id=recipes.id)
        await repo.create(owner.id, "Soups", parent_id=recipes.id)
        await repo.create(owner.id, "Travel")
        await repo.create(other.id, "Not mine")

        page, total = await repo.list_for_user(owner.id, limit=2)
        roots, roots_total = await repo.list_for_user(owner.id, root_only=True)
        children, children_total = await repo.list_for_user(owner.id, parent_id=recipes.id)

        assert [t.title for t in page] == ["Travel", "Soups"]
        assert total == 4
        assert {t.title for t in roots} == {"Recipes", "Travel"}
        assert roots_total == 2
        assert {t.title for t in children} == {"Pasta", "Soups"}
        assert children_total == 2

    @pytest.mark.asyncio
    async def test_update_bumps_updated_at(self, test_db):
        from knowtes.repositories import TopicRepository

        owner = await _make_user(test_db)
        repo = TopicRepository(test_db)
        topic = await repo.create(owner.id, "Recipes")
        before = topic.updated_at

        updated = await repo.update(topic, title="Cooking")

        assert updated.title == "Cooking"
        assert updated.updated_at > before

    @pytest.mark.asyncio
    async def test_delete_cascades(self, test_db):
        from knowtes.models import Note, SummaryStat, Topic
        from knowtes.repositories import NoteRepository, SummaryStatRepository, TopicRepository

        owner = await _make_user(test_db)
        topics = TopicRepository(test_db)
        notes = NoteRepository(test_db)
        stats = SummaryStatRepository(test_db)
        recipes = await topics.create(owner.id, "Recipes")
        pasta = await topics.create(owner.id, "Pasta", parent_id=recipes.id)
        travel = await topics.create(owner.id, "Travel")
        await notes.create(owner.id, recipes.id, title="Bread", content="flour")
        await notes.create(owner.id, pasta.id, title="Carbonara", content="eggs")
        await notes.create(owner.id, travel.id, title="Rome", content="")
        await stats.create_pending(owner.id, pasta.id)
        recipes_id, pasta_id, travel_id = recipes.id, pasta.id, travel.id

        await topics.delete(recipes)

        assert await _count(test_db, Topic, Topic.id.in_([recipes_id, pasta_id])) == 0
        assert await _count(test_db, Topic, Topic.id == travel_id) == 1
        assert await _count(test_db, Note) == 1
        assert await _count(test_db, SummaryStat) == 0


class TestNoteRepository:
    @pytest.mark.asyncio
    async def test_get_is_scoped_to_owner(self, test_db):
        from knowtes.repositories import NoteRepository, TopicRepository

        owner = await _make_user(test_db)
        other = await _make_user(test_db)
        topic = await TopicRepository(test_db).create(owner.id, "Recipes")
        repo = NoteRepository(test_db)
        note = await repo.create(owner.id, topic.id, title="Carbonara", content="eggs")

        assert (await repo.get(owner.id, note.id)).content == "eggs"
        assert await repo.get(other.id, note.id) is None
        assert await repo.list_for_topic(other.id, topic.id) == ([], 0)

    @pytest.mark.asyncio
    async def test_is_summary_filter_and_source_notes(self, test_db):
        from knowtes.repositories import NoteRepository, TopicRepository

        owner = await _make_user(test_db)
        topic = await TopicRepository(test_db).create(owner.id, "Pasta")
        repo = NoteRepository(test_db)
        await repo.create(owner.id, topic.id, title="Carbonara", content="eggs")
        await repo.create(owner.id, topic.id, title="Summary", content="...", is_summary=True)
        await repo.create(owner.id, topic.id, title="Cacio e pepe", content="pepper")

        summaries, summaries_total = await repo.list_for_topic(owner.id, topic.id, is_summary=True)
        plain, plain_total = await repo.list_for_topic(owner.id, topic.id, is_summary=False)
        page, total = await repo.list_for_topic(owner.id, topic.id, limit=1, offset=1)
        sources = await repo.list_source_notes(owner.id, topic.id)

        assert [n.title for n in summaries] == ["Summary"]
        assert summaries_total == 1
        assert [n.title for n in plain] == ["Cacio e pepe", "Carbonara"]
        assert plain_total == 2
        assert [n.title for n in page] == ["Summary"]
        assert total == 3
        assert [n.title for n in sources] == ["Carbonara", "Cacio e pepe"]

    @pytest.mark.asyncio
    async def test_content_whitespace_is_stored_verbatim(self, test_db):
        from knowtes.repositories import NoteRepository, TopicRepository

        owner = await _make_user(test_db)
        topic = await TopicRepository(test_db).create(owner.id, "Code")
        repo = NoteRepository(test_db)
        body = "    def f():\n        return 1\n"

        note = await repo.create(owner.id, topic.id, title="Snippet", content=body)

        assert note.content == body

    @pytest.mark.asyncio
    async def test_content_length_constraint(self, test_db):
        from knowtes.repositories import NoteRepository, TopicRepository

        owner = await _make_user(test_db)
        topic = await TopicRepository(test_db).create(owner.id, "Long")

        with pytest.raises(IntegrityError):
            await NoteRepository(test_db).create(owner.id, topic.id, title="Long", content="x" * 3001)

    @pytest.mark.asyncio
    async def test_delete_summary_note_unlinks_stat(self, test_db):
        from knowtes.repositories import NoteRepository, SummaryStatRepository, TopicRepository

        owner = await _make_user(test_db)
        topic = await TopicRepository(test_db).create(owner.id, "Pasta")
        notes = NoteRepository(test_db)
        stats = SummaryStatRepository(test_db)
        note = await notes.create(owner.id, topic.id, title="Summary", content="...", is_summary=True)
        stat = await stats.create_pending(owner.id, topic.id)
        await stats.mark_accepted(stat, note.id)

        await notes.delete(note)
        await test_db.refresh(stat)

        assert stat.summary_note_id is None
        assert stat.accepted is True


class TestSummaryStatRepository:
    @pytest.mark.asyncio
    async def test_scoping_and_accepted_filter(self, test_db):
        from knowtes.repositories import SummaryStatRepository, TopicRepository

        owner = await _make_user(test_db)
        other = await _make_user(test_db)
        topic = await TopicRepository(test_db).create(owner.id, "Pasta")
        repo = SummaryStatRepository(test_db)
        pending = await repo.create_pending(owner.id, topic.id)
        accepted = await repo.create_pending(owner.id, topic.id)
        await repo.mark_accepted(accepted, None)

        pending_items, pending_total = await repo.list_for_topic(owner.id, topic.id, accepted=False)
        _, total = await repo.list_for_topic(owner.id, topic.id)

        assert pending.accepted is False
        assert pending.summary_note_id is None
        assert [s.id for s in pending_items] == [pending.id]
        assert pending_total == 1
        assert total == 2
        assert await repo.get(other.id, pending.id) is None
        assert await repo.list_for_topic(other.id, topic.id) == ([], 0)

    @pytest.mark.asyncio
    async def test_delete(self, test_db):
        from knowtes.models import SummaryStat
        from knowtes.repositories import SummaryStatRepository, TopicRepository

        owner = await _make_user(test_db)
        topic = await TopicRepository(test_db).create(owner.id, "Pasta")
        repo = SummaryStatRepository(test_db)
        stat = await repo.create_pending(owner.id, topic.id)

        await repo.delete(stat)

        assert await _count(test_db, SummaryStat) == 0


class TestAcceptTransaction:
    async def _seed(self, db):
        from knowtes.repositories import NoteRepository, SummaryStatRepository, TopicRepository

        owner = await _make_user(db)
        topic = await TopicRepository(db).create(owner.id, "Pasta")
        await NoteRepository(db).create(owner.id, topic.id, title="Carbonara", content="eggs")
        stat = await SummaryStatRepository(db).create_pending(owner.id, topic.id)
        await db.commit()
        return owner.id, topic.id, stat

    @pytest.mark.asyncio
    async def test_accept_links_note(self, test_db):
        from knowtes.models import Note
        from knowtes.services.summary_service import SummaryService

        user_id, topic_id, stat = await self._seed(test_db)
        stat_id = stat.id

        result = await SummaryService(test_db, None).accept(
            user_id, topic_id, stat_id, title="Roman pasta", content="Eggs and pecorino."
        )
        await test_db.refresh(stat)

        assert stat.accepted is True
        assert stat.summary_note_id == result.note.id
        assert await _count(test_db, Note, Note.is_summary.is_(True)) == 1

    @pytest.mark.asyncio
    async def test_failed_link_leaves_no_note(self, test_db):
        from knowtes.models import Note
        from knowtes.repositories import SummaryStatRepository
        from knowtes.services.summary_service import SummaryService

        user_id, topic_id, stat = await self._seed(test_db)
        stat_id = stat.id
        stats = SummaryStatRepository(test_db)
        stats.mark_accepted = AsyncMock(side_effect=OperationalError("UPDATE", {}, Exception()))
        service = SummaryService(test_db, None, stats=stats)

        with pytest.raises(OperationalError):
            await service.accept(user_id, topic_id, stat_id, title="Roman pasta", content="...")

        assert await _count(test_db, Note, Note.is_summary.is_(True)) == 0
        assert await _count(test_db, Note) == 1
        refreshed = await stats.get(user_id, stat_id)
        await test_db.refresh(refreshed)
        assert refreshed.accepted is False
        assert refreshed.summary_note_id is None
