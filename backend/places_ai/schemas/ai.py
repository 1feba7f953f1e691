"""
Favorite Places AI Backend - Pydantic Schemas
==============================================

What:  Request bodies, domain values and response models for the AI routes.
How:   FastAPI validates request bodies against the *Request models and
       serializes the response models (by alias, so clients see camelCase).
Who:   Routes, the orchestrator service and the prompt builder.

Request models are deliberately loose (everything optional): missing or
blank required fields are reported by the orchestrators with the exact
400 messages clients rely on, rather than by FastAPI's generic 422.
Text fields holding another JSON type (`{"notes": 5}`) are read as absent.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


def _text_or_none(value: Any) -> Optional[str]:
    """Keeps strings; any other JSON type (number, list, object) counts as absent."""
    return value if isinstance(value, str) else None


class SummarizeNotesRequest(BaseModel):
    """Body of POST /ai/summarize-notes."""
    title: Optional[str] = Field(default=None, description="Place name")
    category: Optional[str] = Field(default=None, description="Place category (cafe, park, ...)")
    address: Optional[str] = Field(default=None, description="Street address")
    notes: Optional[str] = Field(default=None, description="Raw notes to summarize (required)")

    @field_validator("title", "category", "address", "notes", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> Optional[str]:
        return _text_or_none(v)


class SuggestTagsRequest(BaseModel):
    """Body of POST /ai/suggest-tags."""
    photo_url: Optional[str] = Field(
        default=None,
        alias="photoUrl",
        description="Publicly reachable URL of the place photo (required)",
    )
    title: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None)

    model_config = {"populate_by_name": True}

    @field_validator("photo_url", "title", "category", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> Optional[str]:
        return _text_or_none(v)


class SmartSearchRequest(BaseModel):
    """Body of POST /ai/smart-search."""
    query: Optional[str] = Field(default=None, description="Natural language question")
    # Any: a non-list value must surface as the 400 "query and places array are required"
    places: Optional[Any] = Field(default=None, description="Saved places to search over")

    @field_validator("query", mode="before")
    @classmethod
    def text_fields(cls, v: Any) -> Optional[str]:
        return _text_or_none(v)


# ══════════════════════════════════════════════════════════════════════════
# Domain Values (request-scoped, never persisted)
# ══════════════════════════════════════════════════════════════════════════


class PlaceContext(BaseModel):
    """Place metadata and notes fed to the summary prompt."""
    title: Optional[str] = None
    category: Optional[str] = None
    address: Optional[str] = None
    notes: str


class ImageSignal(BaseModel):
    """
    Compact result of one image-annotation call.

    An ImageSignal with all lists empty means "the service answered with
    nothing"; a missing ImageSignal (None) means "no signal available".
    The two are rendered differently in the tag prompt.
    """
    labels: List[str] = Field(default_factory=list)
    landmarks: List[str] = Field(default_factory=list)
    dominant_color_shares: List[str] = Field(default_factory=list)


class SearchCandidate(BaseModel):
    """One saved place as offered to the smart-search prompt."""
    id: str
    title: str = ""
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    notes: str = ""

    @classmethod
    def from_payload(cls, payload: Any) -> "SearchCandidate":
        """
        Builds a candidate from one client-supplied place object.

        Clients send whatever their local store holds, so unknown keys are
        ignored and scalar fields are stringified. Non-list tags count as none.
        """
        data: Dict[str, Any] = payload if isinstance(payload, dict) else {}
        tags = data.get("tags")
        return cls(
            id=_as_text(data.get("id")),
            title=_as_text(data.get("title")),
            category=_as_text(data.get("category")),
            tags=[_as_text(t) for t in tags] if isinstance(tags, list) else [],
            notes=_as_text(data.get("notes")),
        )


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class GeneratedSummary(BaseModel):
    """Structured summary of a place's notes. All three fields are non-empty."""
    why_i_liked_it: str = Field(alias="whyILikedIt")
    tips: str
    best_time_to_go: str = Field(alias="bestTimeToGo")

    model_config = {"populate_by_name": True}


class GeneratedTags(BaseModel):
    """Suggested tags. Always a list, possibly empty."""
    tags: List[str] = Field(default_factory=list)


class SearchResult(BaseModel):
    """Ids of matching places plus the model's explanation."""
    matching_ids: List[str] = Field(default_factory=list, alias="matchingIds")
    explanation: str = ""

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """
    Error body shared by every endpoint.

    Example:
        {
            "error": "validation_error",
            "message": "Notes field is required",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Extra context (development only for 500s)")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class ServiceInfoResponse(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str


class HealthResponse(BaseModel):
    """Returned by GET /health for probes and monitoring."""
    status: str = Field(description="healthy")
    version: str = Field(description="Application version")
    uptime_seconds: float = Field(description="Seconds since service started")
    timestamp: str = Field(description="Current server time (UTC ISO 8601)")
    gemini: str = Field(description="configured or unconfigured")
    vision: str = Field(description="enabled or disabled")
