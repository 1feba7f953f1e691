"""
Favorite Places AI Backend - Prompt Builder
============================================

What:  Pure functions that assemble the instruction text for each AI task.
How:   Caller context is formatted into fixed templates. No I/O, no state.
Who:   Called by AIService before each generation call.

Every prompt asks for bare JSON with no markdown and no surrounding prose.
The response parser does not rely on the model obeying that.
"""

from typing import Optional, Sequence

from places_ai.schemas.ai import ImageSignal, PlaceContext, SearchCandidate

# Notes longer than this are cut in the search prompt to keep it bounded
SEARCH_NOTES_PREVIEW_CHARS = 100

SUMMARY_PROMPT = """You are an expert at analyzing travel notes and creating structured summaries.
Your job is to take raw, unstructured notes about a place and organize them into three clear sections.

Return ONLY valid JSON in this exact format (no other text, no markdown):
{{
  "whyILikedIt": "A concise 1-2 sentence explanation of what made this place special",
  "tips": "Practical advice for future visitors (2-3 sentences)",
  "bestTimeToGo": "When to visit (time of day, season, or conditions)"
}}

Keep each field brief and actionable. If the notes don't contain info for a field, use your best judgment based on the place type.

Place: {title}
Category: {category}
Location: {address}

Raw notes:
{notes}

Create a structured summary following the JSON format specified."""

TAG_PROMPT = """You are an expert at analyzing images and generating relevant, useful tags for a places app.
Based on the image analysis data and place context, suggest 5-8 relevant tags that would help users categorize and search for this place.

Focus on:
- Atmosphere (cozy, modern, rustic, vibrant, etc.)
- Activities (dining, photography, relaxation, etc.)
- Audience (family-friendly, romantic, group-friendly, solo-friendly, etc.)
- Characteristics (indoor/outdoor, quiet/lively, budget-friendly/upscale, etc.)

Return ONLY valid JSON in this format (no other text, no markdown):
{{
  "tags": ["tag1", "tag2", "tag3"]
}}

Keep tags short (1-2 words each) and practical.

Place: {title}
Category: {category}
{image_section}
Suggest relevant tags for this place."""

SEARCH_PROMPT = """You are a smart search assistant for a places app.
Given a natural language query and a list of places, identify which places best match the user's intent.

Return ONLY valid JSON in this format (no other text, no markdown):
{{
  "matchingIds": ["place-id-1", "place-id-2"],
  "explanation": "Brief explanation of why these places match"
}}

If no places match, return empty array with explanation.

User query: "{query}"

Available places:
{candidates}

Which places match the query?"""


def build_summary_prompt(place: PlaceContext) -> str:
    """Prompt asking for {whyILikedIt, tips, bestTimeToGo}; notes are embedded verbatim."""
    return SUMMARY_PROMPT.format(
        title=place.title or "Unknown",
        category=place.category or "General",
        address=place.address or "Not provided",
        notes=place.notes,
    )


def build_tag_prompt(
    title: Optional[str],
    category: Optional[str],
    signal: Optional[ImageSignal] = None,
) -> str:
    """
    Prompt asking for 5-8 short tags.

    With no signal the prompt has no image-analysis section at all; an empty
    signal still gets a section, listing "none" for each field.
    """
    image_section = ""
    if signal is not None:
        image_section = "\nImage analysis:\n" + format_image_signal(signal) + "\n"
    return TAG_PROMPT.format(
        title=title or "Unknown",
        category=category or "General",
        image_section=image_section,
    )


def build_search_prompt(query: str, candidates: Sequence[SearchCandidate]) -> str:
    """Prompt asking for {matchingIds, explanation}; one line per candidate, none dropped."""
    return SEARCH_PROMPT.format(
        query=query,
        candidates="\n".join(format_candidate_line(c) for c in candidates),
    )


def format_image_signal(signal: ImageSignal) -> str:
    return "\n".join([
        f"Labels detected: {_join_or_none(signal.labels)}",
        f"Landmarks: {_join_or_none(signal.landmarks)}",
        f"Dominant colors: {_join_or_none(signal.dominant_color_shares)}",
    ])


def format_candidate_line(candidate: SearchCandidate) -> str:
    notes = candidate.notes[:SEARCH_NOTES_PREVIEW_CHARS] or "none"
    return (
        f"ID: {candidate.id} | Title: {candidate.title} | Category: {candidate.category} "
        f"| Tags: {_join_or_none(candidate.tags)} | Notes: {notes}"
    )


def _join_or_none(values: Sequence[str]) -> str:
    return ", ".join(values) if values else "none"
