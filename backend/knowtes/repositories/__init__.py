"""Typed data access, one repository per entity.

Every lookup is scoped to the caller's ``user_id``. Repositories only
``flush``; committing is left to the request session (``get_db``) or to
the service that owns a multi-step workflow.
"""

from knowtes.repositories.notes import NoteRepository
from knowtes.repositories.summary_stats import SummaryStatRepository
from knowtes.repositories.topics import TopicRepository

__all__ = ["NoteRepository", "SummaryStatRepository", "TopicRepository"]
