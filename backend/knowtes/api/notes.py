"""Note CRUD endpoints.

- GET    /topics/{topic_id}/notes  -- paginated notes of a topic
- POST   /topics/{topic_id}/notes  -- create a note in a topic
- GET    /notes/{note_id}
- PUT    /notes/{note_id}          -- partial update (title and/or content)
- DELETE /notes/{note_id}
"""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Query, Response

from knowtes.api.deps import CurrentUser, DbSession, Notes, Topics
from knowtes.api.topics import get_owned_topic
from knowtes.errors import NotFoundError
from knowtes.models import Note
from knowtes.schemas import NoteCreate, NoteResponse, NoteUpdate, Page

router = APIRouter(tags=["notes"])


async def _get_owned_note(notes: Notes, user_id: uuid.UUID, note_id: uuid.UUID) -> Note:
    note = await notes.get(user_id, note_id)
    if note is None:
        raise NotFoundError("Note not found")
    return note


@router.get("/topics/{topic_id}/notes")
async def list_notes(
    topic_id: uuid.UUID,
    current_user: CurrentUser,
    topics: Topics,
    notes: Notes,
    is_summary: bool | None = None,
    limit: Annotated[int, Query(ge=1)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> Page[NoteResponse]:
    user_id = current_user["user_id"]
    await get_owned_topic(topics, user_id, topic_id)

    items, total = await notes.list_for_topic(
        user_id, topic_id, is_summary=is_summary, limit=limit, offset=offset
    )
    data = [NoteResponse.model_validate(n) for n in items]
    return Page[NoteResponse](data=data, count=len(data), total=total)


@router.post("/topics/{topic_id}/notes", status_code=201)
async def create_note(
    topic_id: uuid.UUID,
    body: NoteCreate,
    current_user: CurrentUser,
    topics: Topics,
    notes: Notes,
    db: DbSession,
) -> NoteResponse:
    user_id = current_user["user_id"]
    await get_owned_topic(topics, user_id, topic_id)

    note = await notes.create(
        user_id,
        topic_id,
        title=body.title,
        content=body.content,
        is_summary=body.is_summary,
    )
    await db.commit()
    return NoteResponse.model_validate(note)


@router.get("/notes/{note_id}")
async def get_note(
    note_id: uuid.UUID,
    current_user: CurrentUser,
    notes: Notes,
) -> NoteResponse:
    note = await _get_owned_note(notes, current_user["user_id"], note_id)
    return NoteResponse.model_validate(note)


@router.put("/notes/{note_id}")
async def update_note(
    note_id: uuid.UUID,
    body: NoteUpdate,
    current_user: CurrentUser,
    notes: Notes,
    db: DbSession,
) -> NoteResponse:
    note = await _get_owned_note(notes, current_user["user_id"], note_id)
    note = await notes.update(note, title=body.title, content=body.content)
    await db.commit()
    return NoteResponse.model_validate(note)


@router.delete("/notes/{note_id}", status_code=204)
async def delete_note(
    note_id: uuid.UUID,
    current_user: CurrentUser,
    notes: Notes,
    db: DbSession,
) -> Response:
    note = await _get_owned_note(notes, current_user["user_id"], note_id)
    await notes.delete(note)
    await db.commit()
    return Response(status_code=204)
