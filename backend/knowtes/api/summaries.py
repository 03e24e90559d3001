"""AI summary endpoints for a topic.

- GET  /topics/{topic_id}/summaries                           -- list attempts
- POST /topics/{topic_id}/summaries                           -- generate a draft
- PUT  /topics/{topic_id}/summaries/{summary_id}/accept       -- save draft as a note
- PUT  /topics/{topic_id}/summaries/{summary_id}/reject       -- discard the attempt
"""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Query, Response

from knowtes.api.deps import CurrentUser, Summaries
from knowtes.schemas import (
    AcceptedSummaryResponse,
    GeneratedSummaryResponse,
    NoteResponse,
    Page,
    SummaryAccept,
    SummaryStatResponse,
)

router = APIRouter(prefix="/topics/{topic_id}/summaries", tags=["summaries"])


@router.get("")
async def list_summaries(
    topic_id: uuid.UUID,
    current_user: CurrentUser,
    summaries: Summaries,
    accepted: bool | None = None,
    limit: Annotated[int, Query(ge=1)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> Page[SummaryStatResponse]:
    items, total = await summaries.list_for_topic(
        current_user["user_id"], topic_id, accepted=accepted, limit=limit, offset=offset
    )
    data = [SummaryStatResponse.model_validate(s) for s in items]
    return Page[SummaryStatResponse](data=data, count=len(data), total=total)


@router.post("", status_code=201)
async def generate_summary(
    topic_id: uuid.UUID,
    current_user: CurrentUser,
    summaries: Summaries,
) -> GeneratedSummaryResponse:
    """Generate a summary draft from the topic's notes.

    The draft is not saved as a note until it is accepted.
    """
    generated = await summaries.generate(current_user["user_id"], topic_id)
    return GeneratedSummaryResponse(
        summary_stat_id=generated.summary_stat_id,
        title=generated.title,
        content=generated.content,
    )


@router.put("/{summary_id}/accept")
async def accept_summary(
    topic_id: uuid.UUID,
    summary_id: uuid.UUID,
    body: SummaryAccept,
    current_user: CurrentUser,
    summaries: Summaries,
) -> AcceptedSummaryResponse:
    accepted = await summaries.accept(
        current_user["user_id"],
        topic_id,
        summary_id,
        title=body.title,
        content=body.content,
    )
    return AcceptedSummaryResponse(
        summary_stat_id=accepted.summary_stat_id,
        note=NoteResponse.model_validate(accepted.note),
    )


@router.put("/{summary_id}/reject", status_code=204)
async def reject_summary(
    topic_id: uuid.UUID,
    summary_id: uuid.UUID,
    current_user: CurrentUser,
    summaries: Summaries,
) -> Response:
    await summaries.reject(current_user["user_id"], topic_id, summary_id)
    return Response(status_code=204)
