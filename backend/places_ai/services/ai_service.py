"""
Favorite Places AI Backend - AI Task Orchestrator
==================================================

What:  The three AI tasks: summarize notes, suggest tags, smart search.
How:   Each task is one sequential pass:

           validate input
             → (suggest tags only) image signal, failures absorbed
             → build prompt
             → generate text
             → extract JSON
             → shape into a strict response model

Who:   Called by routes/ai.py through the get_ai_service dependency.

Failure handling:
    ValidationError is raised before any outbound call and passes through
    unchanged (→ 400). Every later failure is logged and re-raised as
    AITaskError carrying the task's generic message (→ 500). There is no
    partial output: a task either returns its full model or fails.

AIService holds no per-request state; the generator and the signal
extractor are stateless from its point of view.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

from places_ai.config import settings
from places_ai.exceptions import (
    AITaskError,
    GenerationError,
    MalformedResponseError,
    PlacesAIError,
    ValidationError,
)
from places_ai.schemas.ai import (
    GeneratedSummary,
    GeneratedTags,
    PlaceContext,
    SearchCandidate,
    SearchResult,
)
from places_ai.services.llm_base import TextGenerator
from places_ai.services.prompt_builder import (
    build_search_prompt,
    build_summary_prompt,
    build_tag_prompt,
)
from places_ai.services.response_parser import extract_json
from places_ai.services.vision_service import ImageSignalExtractor, NoImageSignalExtractor

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = ("whyILikedIt", "tips", "bestTimeToGo")


class AIService:
    """
    Orchestrates prompt → generation → extraction → shaping for each task.

    Args:
        generator:          Text model client (GeminiTextGenerator in production)
        signal_extractor:   Image signal source; defaults to the no-op extractor
        max_attempts:       Total generation attempts; 1 disables retry
        retry_wait:         Tenacity wait strategy between attempts
        restrict_search_ids: Drop matchingIds not present in the candidates
    """

    def __init__(
        self,
        generator: TextGenerator,
        signal_extractor: Optional[ImageSignalExtractor] = None,
        max_attempts: Optional[int] = None,
        retry_wait: Optional[wait_base] = None,
        restrict_search_ids: Optional[bool] = None,
    ):
        self.generator = generator
        self.signal_extractor = signal_extractor or NoImageSignalExtractor()
        self.max_attempts = max_attempts or settings.generation_max_attempts
        self.retry_wait = retry_wait or wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        )
        self.restrict_search_ids = (
            settings.search_restrict_to_candidates
            if restrict_search_ids is None
            else restrict_search_ids
        )

    # ── Summarize Notes ───────────────────────────────────────────────────

    async def summarize_notes(
        self,
        notes: Optional[str],
        title: Optional[str] = None,
        category: Optional[str] = None,
        address: Optional[str] = None,
        caller_id: str = "anonymous",
    ) -> GeneratedSummary:
        """
        Turns raw notes into {whyILikedIt, tips, bestTimeToGo}.

        Raises:
            ValidationError: notes missing or blank (no outbound call made)
            AITaskError:     generation or extraction failed
        """
        # ── Validate: nothing leaves the process for bad input ────────────
        if not notes or not notes.strip():
            raise ValidationError(message="Notes field is required", field="notes")

        # ── Prompt → generate → extract → shape ───────────────────────────
        place = PlaceContext(title=title, category=category, address=address, notes=notes)

        try:
            document = await self._generate_json(build_summary_prompt(place))
            summary = shape_summary(document)
        except Exception as e:
            raise self._task_failure("summarize_notes", "Failed to generate summary", e) from e

        logger.info("Notes summarized for user %s: %s", caller_id, title)
        return summary

    # ── Suggest Tags ──────────────────────────────────────────────────────

    async def suggest_tags(
        self,
        photo_url: Optional[str],
        title: Optional[str] = None,
        category: Optional[str] = None,
        caller_id: str = "anonymous",
    ) -> GeneratedTags:
        """
        Suggests 5-8 tags for a place photo.

        The image signal is best effort: the extractor returns None on any
        failure and the prompt is then built without an image section.

        Raises:
            ValidationError: photo_url missing (no outbound call made)
            AITaskError:     generation or extraction failed
        """
        # ── Validate ──────────────────────────────────────────────────────
        if not photo_url:
            raise ValidationError(message="photoUrl is required", field="photoUrl")

        try:
            # None when Vision is off or failed; the prompt then omits the image section
            signal = await self.signal_extractor.extract(photo_url)
            document = await self._generate_json(build_tag_prompt(title, category, signal))
            tags = shape_tags(document)
        except Exception as e:
            raise self._task_failure("suggest_tags", "Failed to generate tags", e) from e

        logger.info(
            "Tags suggested for user %s: %s (%d tags, image signal=%s)",
            caller_id,
            title,
            len(tags.tags),
            signal is not None,
        )
        return tags

    # ── Smart Search ──────────────────────────────────────────────────────

    async def smart_search(
        self,
        query: Optional[str],
        places: Any,
        caller_id: str = "anonymous",
    ) -> SearchResult:
        """
        Asks the model which saved places match a natural-language query.

        Every candidate goes into the prompt, and an empty list still calls
        the model. matchingIds are passed through unless restrict_search_ids
        is set.

        Raises:
            ValidationError: query missing or places not a list
            AITaskError:     generation or extraction failed
        """
        # ── Validate ──────────────────────────────────────────────────────
        if not query or not isinstance(places, list):
            raise ValidationError(
                message="query and places array are required",
                context={"fields": ["query", "places"]},
            )

        # Malformed entries become empty fields instead of failing the request
        candidates = [SearchCandidate.from_payload(p) for p in places]

        try:
            document = await self._generate_json(build_search_prompt(query, candidates))
            result = shape_search_result(document)
        except Exception as e:
            raise self._task_failure("smart_search", "Failed to process search", e) from e

        # Off by default: the model's ids pass through unchanged
        if self.restrict_search_ids:
            result = restrict_to_candidates(result, candidates)

        logger.info(
            'Smart search for user %s: "%s" (%d matches)',
            caller_id,
            query,
            len(result.matching_ids),
        )
        return result

    # ── Pipeline Helpers ──────────────────────────────────────────────────

    async def _generate_json(self, prompt: str) -> Dict[str, Any]:
        text = await self._generate_with_retry(prompt)
        return extract_json(text)

    async def _generate_with_retry(self, prompt: str) -> str:
        """Calls the generator, retrying GenerationError only, up to max_attempts in total."""
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(GenerationError),
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        # With max_attempts=1 this is a single call; MalformedResponseError is
        # raised later by extract_json and never retried
        async for attempt in retrying:
            with attempt:
                text = await self.generator.generate(prompt)
        return text

    @staticmethod
    def _task_failure(task: str, message: str, error: Exception) -> AITaskError:
        # Known failures keep their error_code as the kind; anything else is a bug
        if isinstance(error, PlacesAIError):
            logger.error("%s failed (%s): %s", task, error.error_code, error.message)
            return AITaskError(task=task, message=message, kind=error.error_code, detail=error.message)

        logger.error("%s failed unexpectedly: %s", task, str(error), exc_info=True)
        return AITaskError(task=task, message=message, kind="unexpected_error", detail=str(error))


# ══════════════════════════════════════════════════════════════════════════
# Output Shaping
# ══════════════════════════════════════════════════════════════════════════


def shape_summary(document: Dict[str, Any]) -> GeneratedSummary:
    """All three fields must be present and non-blank; values are stringified."""
    values = {}
    missing = []
    for key in SUMMARY_FIELDS:
        value = document.get(key)
        text = "" if value is None else str(value).strip()
        if not text:
            missing.append(key)
        values[key] = text
    if missing:
        raise MalformedResponseError(
            message=f"Model response is missing summary fields: {', '.join(missing)}",
            context={"missing_fields": missing},
        )
    return GeneratedSummary(**values)


def shape_tags(document: Dict[str, Any]) -> GeneratedTags:
    """A non-list `tags` value (string, null, missing) becomes an empty list."""
    tags = document.get("tags")
    if not isinstance(tags, list):
        return GeneratedTags(tags=[])
    return GeneratedTags(tags=[t if isinstance(t, str) else str(t) for t in tags])


def shape_search_result(document: Dict[str, Any]) -> SearchResult:
    """
    `matchingIds` must be a list, like the three summary fields it carries the
    answer; a missing or non-list value is a malformed response. A missing
    `explanation` is only commentary and becomes "".
    """
    ids = document.get("matchingIds")
    if not isinstance(ids, list):
        raise MalformedResponseError(
            message="Model response has no matchingIds list",
            context={"matchingIds_type": type(ids).__name__},
        )

    explanation = document.get("explanation")
    return SearchResult(
        matching_ids=[str(i) for i in ids],
        explanation="" if explanation is None else str(explanation),
    )


def restrict_to_candidates(
    result: SearchResult,
    candidates: Sequence[SearchCandidate],
) -> SearchResult:
    known = {c.id for c in candidates}
    kept: List[str] = [i for i in result.matching_ids if i in known]
    dropped = len(result.matching_ids) - len(kept)
    if dropped:
        logger.warning("Dropped %d matchingIds not present in submitted places", dropped)
    return SearchResult(matching_ids=kept, explanation=result.explanation)
