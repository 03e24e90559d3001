"""Topic CRUD endpoints.

Topics form a tree through ``parent_id``. Every lookup is scoped to the
current user; foreign topics answer 404.
"""

from __future__ import annotations

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Query, Response

from knowtes.api.deps import CurrentUser, DbSession, Topics
from knowtes.errors import NotFoundError
from knowtes.models import Topic
from knowtes.schemas import Page, TopicCreate, TopicResponse, TopicUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/topics", tags=["topics"])


async def get_owned_topic(topics: Topics, user_id: uuid.UUID, topic_id: uuid.UUID) -> Topic:
    topic = await topics.get(user_id, topic_id)
    if topic is None:
        raise NotFoundError("Topic not found")
    return topic


@router.get("")
async def list_topics(
    current_user: CurrentUser,
    topics: Topics,
    limit: Annotated[int, Query(ge=1)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    parent_id: uuid.UUID | None = None,
    root_only: bool = False,
) -> Page[TopicResponse]:
    """List the current user's topics, newest first.

    ``parent_id`` returns the direct children of one topic; ``root_only``
    returns top-level topics.
    """
    items, total = await topics.list_for_user(
        current_user["user_id"],
        parent_id=parent_id,
        root_only=root_only,
        limit=limit,
        offset=offset,
    )
    data = [TopicResponse.model_validate(t) for t in items]
    return Page[TopicResponse](data=data, count=len(data), total=total)


@router.post("", status_code=201)
async def create_topic(
    body: TopicCreate,
    current_user: CurrentUser,
    topics: Topics,
    db: DbSession,
) -> TopicResponse:
    user_id = current_user["user_id"]
    if body.parent_id is not None and await topics.get(user_id, body.parent_id) is None:
        raise NotFoundError("Parent topic not found")

    topic = await topics.create(user_id, body.title, parent_id=body.parent_id)
    await db.commit()
    logger.info("Created topic %s", topic.id)
    return TopicResponse.model_validate(topic)


@router.get("/{topic_id}")
async def get_topic(
    topic_id: uuid.UUID,
    current_user: CurrentUser,
    topics: Topics,
) -> TopicResponse:
    topic = await get_owned_topic(topics, current_user["user_id"], topic_id)
    return TopicResponse.model_validate(topic)


@router.put("/{topic_id}")
async def update_topic(
    topic_id: uuid.UUID,
    body: TopicUpdate,
    current_user: CurrentUser,
    topics: Topics,
    db: DbSession,
) -> TopicResponse:
    topic = await get_owned_topic(topics, current_user["user_id"], topic_id)
    topic = await topics.update(topic, title=body.title)
    await db.commit()
    return TopicResponse.model_validate(topic)


@router.delete("/{topic_id}", status_code=204)
async def delete_topic(
    topic_id: uuid.UUID,
    current_user: CurrentUser,
    topics: Topics,
    db: DbSession,
) -> Response:
    """Delete a topic together with its subtopics, notes and summary attempts."""
    topic = await get_owned_topic(topics, current_user["user_id"], topic_id)
    await topics.delete(topic)
    await db.commit()
    logger.info("Deleted topic %s", topic_id)
    return Response(status_code=204)
