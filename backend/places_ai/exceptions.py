"""
Favorite Places AI Backend - Custom Exception Hierarchy
========================================================

What:  Application-specific exceptions for the AI orchestration layer.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into
       JSON error responses with the right HTTP status code.
Who:   Raised by services; caught by orchestrators and global handlers.

Exception Hierarchy:
    PlacesAIError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── GenerationError          → text generation call failed
    ├── MalformedResponseError   → model answered, but no usable JSON
    └── AITaskError              → 500 Internal Server Error (orchestrator boundary)

    Image-annotation failures have no exception type here: they never leave
    the vision service (see services/vision_service.py).
"""

from typing import Any, Dict, Optional


class PlacesAIError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Error description
        context:  Additional debug info (logged, returned only in development)
    """

    # Machine-readable kind, used as the failure kind in responses and logs
    error_code = "places_ai_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PlacesAIError):
    """
    Raised when caller-supplied input fails a precondition.

    When:    Missing or blank required field, wrong shape (e.g. places not a list).
    HTTP:    400 Bad Request. Raised before any outbound call; never retried.
    """

    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class GenerationError(PlacesAIError):
    """
    Raised when the text-generation call fails for any reason.

    Covers network errors, quota exhaustion, rejected requests, upstream 5xx
    and blocked/empty candidates. `upstream_message` keeps the provider's own
    wording for logs and development responses.
    """

    error_code = "generation_error"

    def __init__(
        self,
        upstream_message: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"AI service error: {upstream_message}" if upstream_message else "AI service error"
        super().__init__(message=message, context=context)
        self.upstream_message = upstream_message


class MalformedResponseError(PlacesAIError):
    """
    Raised when the model answered but no structured payload could be recovered.

    Also raised by output shaping when a required field is missing or blank.
    """

    error_code = "malformed_response"

    def __init__(
        self,
        message: str = "Could not extract a JSON object from the model response",
        raw_text: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if raw_text is not None:
            # A short preview is enough to debug; full model output can be large
            ctx["raw_preview"] = raw_text[:200]
        super().__init__(message=message, context=ctx)


class AITaskError(PlacesAIError):
    """
    Raised at the orchestrator boundary when a task fails after validation.

    HTTP:    500 Internal Server Error.
    Carries the task's generic client-facing message ("Failed to generate
    summary") plus the kind and message of the underlying failure. The latter
    are only returned to clients in development mode.
    """

    error_code = "ai_task_failed"

    def __init__(
        self,
        task: str,
        message: str,
        kind: str,
        detail: str,
    ):
        super().__init__(
            message=message,
            context={"task": task, "kind": kind, "detail": detail},
        )
        self.task = task
        self.kind = kind
        self.detail = detail
