"""
Favorite Places AI Backend - AI Route Handlers
===============================================

What:  POST /ai/summarize-notes, /ai/suggest-tags and /ai/smart-search.
How:   Each handler unpacks the JSON body and delegates to AIService. A
       missing body is treated as an empty object, so the required-field
       messages come from AIService exactly as for `{}`.
Who:   Called by the mobile/web client; rate limited by RateLimitMiddleware.

Error responses (rendered by the global handlers in main.py):
    HTTP 400: missing or malformed input (ValidationError)
    HTTP 429: rate limit exceeded (middleware)
    HTTP 500: generation or extraction failed (AITaskError)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from places_ai.dependencies import get_ai_service, get_caller_id
from places_ai.schemas.ai import (
    ErrorResponse,
    GeneratedSummary,
    GeneratedTags,
    SearchResult,
    SmartSearchRequest,
    SuggestTagsRequest,
    SummarizeNotesRequest,
)
from places_ai.services.ai_service import AIService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI"])

_ERROR_RESPONSES = {
    400: {"description": "Missing or invalid input", "model": ErrorResponse},
    429: {"description": "Rate limit exceeded", "model": ErrorResponse},
    500: {"description": "AI processing failed", "model": ErrorResponse},
}


@router.post(
    "/summarize-notes",
    response_model=GeneratedSummary,
    responses=_ERROR_RESPONSES,
    summary="Summarize raw notes about a place",
    description=(
        "Turns unstructured notes into three short sections: why the place "
        "was liked, tips for visitors, and the best time to go."
    ),
)
async def summarize_notes(
    body: Optional[SummarizeNotesRequest] = None,
    service: AIService = Depends(get_ai_service),
    caller_id: str = Depends(get_caller_id),
) -> GeneratedSummary:
    if body is None:
        body = SummarizeNotesRequest()
    return await service.summarize_notes(
        notes=body.notes,
        title=body.title,
        category=body.category,
        address=body.address,
        caller_id=caller_id,
    )


@router.post(
    "/suggest-tags",
    response_model=GeneratedTags,
    responses=_ERROR_RESPONSES,
    summary="Suggest tags for a place photo",
    description=(
        "Analyzes the photo with Google Cloud Vision when available, then asks "
        "Gemini for 5-8 short tags. Works without Vision, using place context only."
    ),
)
async def suggest_tags(
    body: Optional[SuggestTagsRequest] = None,
    service: AIService = Depends(get_ai_service),
    caller_id: str = Depends(get_caller_id),
) -> GeneratedTags:
    if body is None:
        body = SuggestTagsRequest()
    return await service.suggest_tags(
        photo_url=body.photo_url,
        title=body.title,
        category=body.category,
        caller_id=caller_id,
    )


@router.post(
    "/smart-search",
    response_model=SearchResult,
    responses=_ERROR_RESPONSES,
    summary="Natural language search over saved places",
    description=(
        'Answers questions like "where did I eat pasta?" by asking Gemini which '
        "of the submitted places match. Returns their ids and a short explanation."
    ),
)
async def smart_search(
    body: Optional[SmartSearchRequest] = None,
    service: AIService = Depends(get_ai_service),
    caller_id: str = Depends(get_caller_id),
) -> SearchResult:
    if body is None:
        body = SmartSearchRequest()
    return await service.smart_search(
        query=body.query,
        places=body.places,
        caller_id=caller_id,
    )
