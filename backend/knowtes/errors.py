"""Domain exceptions shared by the services and the HTTP layer.

Every exception carries the HTTP status it maps to, so route handlers can
let them propagate and ``knowtes.api.error_handlers`` renders the body:

    {"error": "<message>", "details": <optional payload>}
"""

from __future__ import annotations

from typing import Any


class KnowtesError(Exception):
    """Base class for all application errors.

    Attributes:
        message: Human-readable description returned as ``error``.
        details: Optional JSON-serialisable payload returned as ``details``.
        status_code: HTTP status used when the error reaches a client.
    """

    status_code: int = 500

    def __init__(self, message: str, details: Any = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(KnowtesError):
    """Malformed input or a parameter outside its allowed range."""

    status_code = 400


class InvalidStateError(KnowtesError):
    """The resource exists but is not in a state that allows the operation."""

    status_code = 400


class AuthenticationError(KnowtesError):
    status_code = 401


class AuthorizationError(KnowtesError):
    status_code = 403


class NotFoundError(KnowtesError):
    """Missing resource, or one owned by another user."""

    status_code = 404


class ConflictError(KnowtesError):
    status_code = 409


class InternalError(KnowtesError):
    status_code = 500


# ---------------------------------------------------------------------------
# Completion API failures
# ---------------------------------------------------------------------------


class UpstreamError(KnowtesError):
    """Raised when the completion provider request fails.

    Attributes:
        upstream_status: HTTP status returned by the provider, if any.
        body: Decoded response body (JSON or text), if any.
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        body: Any = None,
    ) -> None:
        self.upstream_status = upstream_status
        self.body = body
        details = None
        if upstream_status is not None or body is not None:
            details = {"upstream_status": upstream_status, "body": body}
        super().__init__(message, details)


class CompletionTimeoutError(UpstreamError):
    """No response from the completion provider within the timeout."""

    status_code = 504

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"Completion request timed out after {timeout_ms}ms")


class ParsingError(UpstreamError):
    """The provider answered but the body is not what was asked for.

    Attributes:
        raw: The content that failed to parse.
    """

    def __init__(self, message: str, raw: Any = None) -> None:
        self.raw = raw
        super().__init__(f"Failed to parse completion response: {message}")
