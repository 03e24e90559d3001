"""OpenRouter chat-completion client.

Talks to any OpenAI-compatible ``/chat/completions`` endpoint with a
plain ``httpx.AsyncClient`` and converts every failure into the
completion error hierarchy from ``knowtes.errors``:

- ``ValidationError``        -- bad arguments, nothing was sent
- ``CompletionTimeoutError`` -- no answer within the timeout
- ``UpstreamError``          -- non-2xx status or transport failure
- ``ParsingError``           -- answer lacks the expected shape

There are no retries: one call, one outbound request.

Usage::

    client = OpenRouterClient(api_key="sk-or-...")
    result = await client.complete_chat_request("Hello")
    draft = await client.generate_summary(["first note", "second note"])
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from knowtes.completion.prompts import summary as summary_prompt
from knowtes.completion.schemas import (
    CompletionResult,
    Message,
    ResponseFormat,
    SummaryDraft,
    TokenUsage,
)
from knowtes.errors import CompletionTimeoutError, ParsingError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
_DEFAULT_MODEL = "openai/gpt-4o-mini"
_DEFAULT_TIMEOUT_MS = 30000


class OpenRouterClient:
    """Async client for the OpenRouter chat-completion API.

    Args:
        api_key: OpenRouter API key.
        base_url: API root; ``/chat/completions`` is appended.
        default_model: Model used when a call does not name one.
        default_timeout_ms: Request timeout used when a call does not set one.
        referer: Value of the ``HTTP-Referer`` attribution header.
        app_title: Value of the ``X-Title`` attribution header.

    Raises:
        ValidationError: If no API key is given.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = _DEFAULT_BASE_URL,
        default_model: str = _DEFAULT_MODEL,
        default_timeout_ms: int = _DEFAULT_TIMEOUT_MS,
        referer: str | None = None,
        app_title: str | None = None,
    ) -> None:
        if not api_key:
            raise ValidationError("OPENROUTER_API_KEY is required")
        self._api_key = api_key
        self._url = base_url.rstrip("/") + "/chat/completions"
        self.default_model = default_model
        self.default_timeout_ms = default_timeout_ms
        self._referer = referer
        self._app_title = app_title
        self._client: httpx.AsyncClient = httpx.AsyncClient()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # chat
    # ------------------------------------------------------------------

    async def complete_chat_request(
        self,
        user_message: str,
        *,
        system_message: str | None = None,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        top_p: float | None = None,
        frequency_penalty: float | None = None,
        presence_penalty: float | None = None,
        response_format: ResponseFormat | None = None,
        timeout_ms: int | None = None,
    ) -> CompletionResult:
        """Send one chat completion request and parse the first choice.

        Args:
            user_message: The user prompt. Must not be blank.
            system_message: Optional system prompt sent before the user message.
            model: Model identifier. Defaults to ``default_model``.
            temperature: Sampling temperature in ``[0, 1]``.
            max_tokens: Maximum tokens to generate, positive when given.
            top_p: Nucleus sampling in ``[0, 1]``.
            frequency_penalty: Forwarded as-is when given.
            presence_penalty: Forwarded as-is when given.
            response_format: Request JSON output; the content is then decoded
                into ``CompletionResult.parsed``.
            timeout_ms: Request timeout. Defaults to ``default_timeout_ms``.

        Returns:
            CompletionResult with content, usage, and metadata.

        Raises:
            ValidationError: On invalid arguments.
            CompletionTimeoutError: When the timeout elapses.
            UpstreamError: On a non-2xx status or transport failure.
            ParsingError: When the response lacks choices/message/content,
                or JSON content does not decode.
        """
        if not user_message or not user_message.strip():
            raise ValidationError("User message is required and cannot be empty")
        if not 0 <= temperature <= 1:
            raise ValidationError("Temperature must be between 0 and 1")
        if max_tokens is not None and max_tokens <= 0:
            raise ValidationError("Max tokens must be greater than 0")
        if top_p is not None and not 0 <= top_p <= 1:
            raise ValidationError("Top P must be between 0 and 1")
        if timeout_ms is not None and timeout_ms <= 0:
            raise ValidationError("Timeout must be greater than 0")

        messages = self._build_messages(system_message, user_message.strip())
        payload: dict[str, Any] = {
            "model": model or self.default_model,
            "messages": [m.model_dump() for m in messages],
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if top_p is not None:
            payload["top_p"] = top_p
        if frequency_penalty is not None:
            payload["frequency_penalty"] = frequency_penalty
        if presence_penalty is not None:
            payload["presence_penalty"] = presence_penalty
        if response_format is not None:
            payload["response_format"] = response_format.to_payload()

        data = await self._post(payload, timeout_ms or self.default_timeout_ms)
        return self._parse_completion(data, expect_json=response_format is not None)

    async def generate_structured_response(
        self,
        user_message: str,
        schema: Mapping[str, Any],
        *,
        schema_name: str = "ResponseSchema",
        strict: bool = True,
        system_message: str | None = None,
        model: str | None = None,
        temperature: float = 0.5,
        max_tokens: int | None = None,
        timeout_ms: int | None = None,
    ) -> Any:
        """Request an answer bound to a JSON schema and return it decoded."""
        if not isinstance(schema, Mapping) or not schema:
            raise ValidationError("A valid JSON schema object is required")

        result = await self.complete_chat_request(
            user_message,
            system_message=system_message,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format=ResponseFormat(
                type="json_schema",
                schema=dict(schema),
                name=schema_name,
                strict=strict,
            ),
            timeout_ms=timeout_ms,
        )
        return result.parsed

    async def generate_summary(
        self,
        content: str | Sequence[str],
        *,
        system_message: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float = 0.7,
        timeout_ms: int | None = None,
    ) -> SummaryDraft:
        """Summarize one or more pieces of text into a title and content.

        Multi-part content is joined with blank lines. The model is asked
        for ``TITLE:`` / ``CONTENT:`` tagged output.

        Raises:
            ValidationError: If there is nothing to summarize.
            ParsingError: If the answer lacks either tag.
        """
        content_text = summary_prompt.join_content(content) if content else ""
        if not content_text:
            raise ValidationError("Content for summarization is required and cannot be empty")

        result = await self.complete_chat_request(
            summary_prompt.build_user_message(content_text),
            system_message=system_message or summary_prompt.SYSTEM_PROMPT,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout_ms=timeout_ms,
        )

        draft = summary_prompt.parse_summary(result.content)
        if draft is None:
            raise ParsingError(
                "Failed to parse summary response format - missing title or content",
                raw=result.content,
            )
        return draft

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _build_messages(system_message: str | None, user_message: str) -> list[Message]:
        messages: list[Message] = []
        if system_message:
            messages.append(Message(role="system", content=system_message))
        messages.append(Message(role="user", content=user_message))
        return messages

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self._referer:
            headers["HTTP-Referer"] = self._referer
        if self._app_title:
            headers["X-Title"] = self._app_title
        return headers

    async def _post(self, payload: dict[str, Any], timeout_ms: int) -> Any:
        """POST the payload and return the decoded JSON body."""
        try:
            response = await self._client.post(
                self._url,
                json=payload,
                headers=self._build_headers(),
                timeout=timeout_ms / 1000,
            )
        except httpx.TimeoutException as exc:
            logger.warning("Completion request timed out after %dms", timeout_ms)
            raise CompletionTimeoutError(timeout_ms) from exc
        except httpx.HTTPError as exc:
            logger.warning("Completion request failed: %s", exc)
            raise UpstreamError(f"Failed to call completion API: {exc}") from exc

        if not response.is_success:
            body = self._decode_body(response)
            logger.warning("Completion API returned HTTP %d", response.status_code)
            raise UpstreamError(
                f"Completion API error: {response.status_code} {response.reason_phrase}",
                upstream_status=response.status_code,
                body=body,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ParsingError("Response body is not valid JSON", raw=response.text) from exc

    @staticmethod
    def _decode_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _parse_completion(data: Any, *, expect_json: bool) -> CompletionResult:
        """Validate the choice/message envelope and extract the content."""
        if not isinstance(data, dict):
            raise ParsingError("Invalid response structure", raw=data)
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ParsingError("Invalid response structure", raw=data)
        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict) or message.get("content") is None:
            raise ParsingError("Invalid response structure", raw=data)

        content = message["content"]
        parsed: Any = None
        if expect_json:
            if isinstance(content, dict | list):
                parsed = content
                content = json.dumps(content)
            else:
                try:
                    parsed = json.loads(content)
                except (TypeError, ValueError) as exc:
                    raise ParsingError(f"Failed to parse JSON response: {exc}", raw=content) from exc
        elif not isinstance(content, str):
            raise ParsingError("Message content is not text", raw=content)

        usage = None
        raw_usage = data.get("usage")
        if isinstance(raw_usage, dict):
            usage = TokenUsage(
                prompt_tokens=raw_usage.get("prompt_tokens") or 0,
                completion_tokens=raw_usage.get("completion_tokens") or 0,
                total_tokens=raw_usage.get("total_tokens") or 0,
            )

        return CompletionResult(
            content=content,
            parsed=parsed,
            model=data.get("model") or "",
            usage=usage,
            finish_reason=choice.get("finish_reason") or "stop",
        )
