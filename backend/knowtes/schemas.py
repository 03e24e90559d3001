"""Request and response models for the HTTP API.

Request models enforce the field bounds of the data model (title and
content lengths, required-field combinations). Response models are built
from ORM rows with ``from_attributes``.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from typing import Annotated, Generic, TypeVar

from pydantic import (
    BaseModel,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)

from knowtes.models import NOTE_CONTENT_MAX_LENGTH, NOTE_TITLE_MAX_LENGTH, TOPIC_TITLE_MAX_LENGTH

T = TypeVar("T")

# Titles are trimmed; note bodies are stored exactly as sent.
TopicTitle = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=TOPIC_TITLE_MAX_LENGTH)
]
NoteTitle = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=NOTE_TITLE_MAX_LENGTH)
]

_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]+$")


class Page(BaseModel, Generic[T]):
    """One page of a list endpoint.

    Attributes:
        data: Items on this page.
        count: Number of items on this page.
        total: Number of items across all pages.
    """

    data: list[T]
    count: int
    total: int


# ---------------------------------------------------------------------------
# Topics
# ---------------------------------------------------------------------------


class TopicCreate(BaseModel):
    title: TopicTitle
    parent_id: uuid.UUID | None = None


class TopicUpdate(BaseModel):
    title: TopicTitle


class TopicResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: uuid.UUID
    user_id: uuid.UUID
    parent_id: uuid.UUID | None
    title: str
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------


class NoteCreate(BaseModel):
    title: NoteTitle
    content: str = Field(default="", max_length=NOTE_CONTENT_MAX_LENGTH)
    is_summary: bool = False


class NoteUpdate(BaseModel):
    title: NoteTitle | None = None
    content: str | None = Field(default=None, max_length=NOTE_CONTENT_MAX_LENGTH)

    @model_validator(mode="after")
    def require_one_field(self) -> NoteUpdate:
        if self.title is None and self.content is None:
            raise ValueError("At least one field (title or content) must be provided")
        return self


class NoteResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: uuid.UUID
    topic_id: uuid.UUID
    user_id: uuid.UUID
    title: str
    content: str
    is_summary: bool
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


class SummaryAccept(BaseModel):
    """Title and content of the summary note, possibly edited by the user."""

    title: NoteTitle
    content: str = Field(min_length=1, max_length=NOTE_CONTENT_MAX_LENGTH)


class GeneratedSummaryResponse(BaseModel):
    summary_stat_id: uuid.UUID
    title: str
    content: str


class AcceptedSummaryResponse(BaseModel):
    summary_stat_id: uuid.UUID
    note: NoteResponse


class SummaryStatResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: uuid.UUID
    user_id: uuid.UUID
    topic_id: uuid.UUID
    summary_note_id: uuid.UUID | None
    accepted: bool
    created_at: datetime


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    password_confirmation: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        if not _PASSWORD_RE.match(v):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, "
                "one number and one special character"
            )
        return v

    @model_validator(mode="after")
    def check_passwords_match(self) -> RegisterRequest:
        if self.password != self.password_confirmation:
            raise ValueError("Passwords don't match")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user_id: uuid.UUID
    email: str


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: uuid.UUID
    email: str
    created_at: datetime
