"""
Favorite Places AI Backend - Structured Response Extraction
============================================================

What:  Recovers a JSON object from a model's free-form text answer.
How:   Tries three strategies in a fixed order and returns the first
       object that parses:

           1. Fenced code block (```json ... ``` or ``` ... ```)
           2. Brace span: balanced `{...}` spans in order of appearance,
              then the greedy first-`{`-to-last-`}` span
           3. The whole text

       Nothing recovered → MalformedResponseError.
Who:   Called by AIService after every generation call.

A fenced block that fails to parse does not end the search; the later
strategies still run. Only JSON objects count: a bare array or scalar is
treated as "no object recovered".
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from places_ai.exceptions import MalformedResponseError

logger = logging.getLogger(__name__)

# Non-greedy so the first fenced block wins when the model emits several
_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)\s*```")
_DECODER = json.JSONDecoder()


def extract_json(raw_text: str) -> Dict[str, Any]:
    """
    Returns the first JSON object recoverable from `raw_text`.

    Raises:
        MalformedResponseError: No strategy produced a JSON object.
    """
    if raw_text is None:
        raise MalformedResponseError(message="Model returned no text")

    fence = _FENCE_RE.search(raw_text)
    if fence:
        parsed = _loads_object(fence.group(1))
        if parsed is not None:
            return parsed
        logger.debug("Fenced block did not contain a JSON object; trying brace scan")

    for start, _end in _balanced_spans(raw_text):
        parsed = _decode_object_at(raw_text, start)
        if parsed is not None:
            return parsed

    first, last = raw_text.find("{"), raw_text.rfind("}")
    if first != -1 and last > first:
        parsed = _loads_object(raw_text[first:last + 1])
        if parsed is not None:
            return parsed

    parsed = _loads_object(raw_text.strip())
    if parsed is not None:
        return parsed

    raise MalformedResponseError(raw_text=raw_text)


def _balanced_spans(text: str) -> List[Tuple[int, int]]:
    """
    (start, end) of every balanced `{...}` span, sorted by start.

    Single pass with a stack of open-brace positions, so a truncated answer
    full of unclosed braces costs O(n). Braces inside JSON string literals
    (including escaped quotes) are skipped; quotes outside any brace are prose.
    """
    spans: List[Tuple[int, int]] = []
    open_positions: List[int] = []
    in_string = False
    escaped = False

    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"' and open_positions:
            in_string = True
        elif ch == "{":
            open_positions.append(i)
        elif ch == "}" and open_positions:
            spans.append((open_positions.pop(), i))

    # Closing order is innermost first; candidates are tried outermost first
    spans.sort()
    return spans


def _decode_object_at(text: str, start: int) -> Optional[Dict[str, Any]]:
    # Parses in place, without copying the span out of the text
    try:
        value, _ = _DECODER.raw_decode(text, start)
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def _loads_object(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(candidate)
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None
