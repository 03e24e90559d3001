"""ORM models for users, topics, notes and summary attempts."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from knowtes.database import Base

TOPIC_TITLE_MAX_LENGTH = 150
NOTE_TITLE_MAX_LENGTH = 150
NOTE_CONTENT_MAX_LENGTH = 3000


def utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )


class Topic(Base):
    """User-owned container node organizing notes.

    ``parent_id`` allows topics to nest; a parent always belongs to the
    same user as its children.
    """

    __tablename__ = "topics"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"))
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("topics.id", ondelete="CASCADE"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(TOPIC_TITLE_MAX_LENGTH), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    __table_args__ = (
        CheckConstraint("char_length(title) >= 1", name="ck_topics_title_not_empty"),
        Index("idx_topics_user_id", "user_id"),
        Index("idx_topics_user_parent", "user_id", "parent_id"),
    )


class Note(Base):
    """User-owned text record belonging to a topic.

    ``is_summary`` marks notes materialised from an accepted AI summary.
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    topic_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("topics.id", ondelete="CASCADE"))
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"))
    title: Mapped[str] = mapped_column(String(NOTE_TITLE_MAX_LENGTH), nullable=False)
    content: Mapped[str] = mapped_column(Text, default="")
    is_summary: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    __table_args__ = (
        CheckConstraint("char_length(title) >= 1", name="ck_notes_title_not_empty"),
        CheckConstraint(
            f"char_length(content) <= {NOTE_CONTENT_MAX_LENGTH}", name="ck_notes_content_length"
        ),
        Index("idx_notes_user_topic", "user_id", "topic_id"),
        Index("idx_notes_topic_summary", "topic_id", "is_summary"),
    )


class SummaryStat(Base):
    """Bookkeeping row for one AI summary generation attempt.

    Lifecycle: inserted pending (``accepted=False``), updated once on
    accept, deleted on reject.
    """

    __tablename__ = "summary_stats"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"))
    topic_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("topics.id", ondelete="CASCADE"))
    summary_note_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("notes.id", ondelete="SET NULL"), nullable=True
    )
    accepted: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    __table_args__ = (Index("idx_summary_stats_user_topic", "user_id", "topic_id"),)
