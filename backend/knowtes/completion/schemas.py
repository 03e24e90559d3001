"""Pydantic v2 schemas for the completion client.

Defines the data structures exchanged with the chat-completion API:
- Message: Chat message with role and content
- ResponseFormat: Structured output request (JSON object / JSON schema)
- TokenUsage: Token consumption tracking
- CompletionResult: Parsed completion response
- SummaryDraft: Title/content pair extracted from a summary completion
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class Message(BaseModel):
    """A single chat message.

    Attributes:
        role: The role of the message sender (system, user, or assistant).
        content: The text content of the message.
    """

    role: Literal["system", "user", "assistant"]
    content: str


class ResponseFormat(BaseModel):
    """Structured output requested from the model.

    Attributes:
        type: ``json_object`` for free-form JSON, ``json_schema`` to bind
            the answer to ``schema``.
        schema_: JSON schema the answer must satisfy (``json_schema`` only).
        name: Schema name reported to the provider.
        strict: Whether the provider should enforce the schema strictly.
    """

    type: Literal["json_object", "json_schema"]
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")
    name: str = "ResponseSchema"
    strict: bool = True

    model_config = {"populate_by_name": True}

    def to_payload(self) -> dict[str, Any]:
        """Render the ``response_format`` field of a completion request."""
        if self.type == "json_object":
            return {"type": "json_object"}
        return {
            "type": "json_schema",
            "json_schema": {
                "name": self.name,
                "strict": self.strict,
                "schema": self.schema_ or {},
            },
        }


class TokenUsage(BaseModel):
    """Token consumption for a single completion request."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CompletionResult(BaseModel):
    """Parsed completion response.

    Attributes:
        content: The generated text content of the first choice.
        parsed: Decoded JSON when a JSON ``response_format`` was requested.
        model: The model that produced this response.
        usage: Optional token usage statistics.
        finish_reason: Why the generation stopped (e.g., "stop", "length").
    """

    content: str
    parsed: Any = None
    model: str
    usage: TokenUsage | None = None
    finish_reason: str = "stop"


class SummaryDraft(BaseModel):
    title: str
    content: str
