"""Combine the responses of a multi-batch run into one logical response.

Each response looks like (simplified)::

    {
        "output": [
            {"type": "message", "content": [{"type": "output_text", "text": "```\\n…\\n```"}]}
        ],
        "output_text": "```\\n…\\n```",
        "usage": {
            "input_tokens": 10,
            "input_tokens_details": {"cached_tokens": 0},
            "output_tokens": 5,
            "output_tokens_details": {"reasoning_tokens": 0},
            "total_tokens": 15
        }
    }

The prompt asks the model to answer inside a code fence, so every text is
unwrapped before the pieces are joined and the result is wrapped again once.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Sequence

from prompt_batch.errors import MergeError
from prompt_batch.logger import get_logger


log = get_logger(__name__)


FENCE = "```"

USAGE_FIELDS = ("input_tokens", "output_tokens", "total_tokens")

# (detail object, counter) pairs summed only when the first response has them.
USAGE_DETAIL_FIELDS = (
    ("input_tokens_details", "cached_tokens"),
    ("output_tokens_details", "reasoning_tokens"),
)


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def strip_fence(text: str) -> str:
    """Return *text* without a leading and/or trailing ``` line.

    The whole opening line goes, so a language hint such as ``json`` after
    the marker is dropped with it.
    """

    cleaned = text.strip()
    if cleaned.startswith(FENCE):
        first_line, newline, rest = cleaned.partition("\n")
        cleaned = rest if newline else first_line[len(FENCE):]
    if cleaned.endswith(FENCE):
        cleaned = cleaned[: -len(FENCE)]
        if cleaned.endswith("\n"):
            cleaned = cleaned[:-1]
    return cleaned.strip()


def wrap_fence(text: str) -> str:
    return f"{FENCE}\n{text}\n{FENCE}"


def _content_items(response: Dict[str, Any]):
    """Yield every content item dict in output order."""

    output = response.get("output")
    if not isinstance(output, list):
        return
    for item in output:
        if not isinstance(item, dict):
            continue
        content = item.get("content")
        if not isinstance(content, list):
            continue
        for part in content:
            if isinstance(part, dict):
                yield part


def extract_texts(response: Dict[str, Any]) -> List[str]:
    """Return the non-empty, fence-stripped texts of *response* in order."""

    fragments: List[str] = []
    for part in _content_items(response):
        text = part.get("text")
        if not isinstance(text, str):
            continue
        cleaned = strip_fence(text)
        if cleaned:
            fragments.append(cleaned)
    return fragments


# ---------------------------------------------------------------------------
# Usage helpers
# ---------------------------------------------------------------------------


def _count(container: Any, key: str) -> int:
    if not isinstance(container, dict):
        return 0
    value = container.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _merge_usage(base_usage: Any, responses: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    usage = dict(base_usage) if isinstance(base_usage, dict) else {}
    usages = [r.get("usage") for r in responses]

    for field in USAGE_FIELDS:
        usage[field] = sum(_count(u, field) for u in usages)

    for detail_key, counter in USAGE_DETAIL_FIELDS:
        if not isinstance(usage.get(detail_key), dict):
            continue
        details = dict(usage[detail_key])
        details[counter] = sum(
            _count(u.get(detail_key) if isinstance(u, dict) else None, counter) for u in usages
        )
        usage[detail_key] = details

    return usage


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def merge_responses(responses: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """Return one response combining *responses* in order.

    A single response is returned as-is. Otherwise the result is a deep copy
    of the first response whose first text slot and ``output_text`` (if the
    key exists) carry every fragment joined by newlines inside one fence, and
    whose usage counters are the sums over all responses. The inputs are not
    modified.
    """

    if not responses:
        raise MergeError("Cannot merge an empty list of responses")

    if len(responses) == 1:
        return responses[0]

    merged = copy.deepcopy(responses[0])

    fragments: List[str] = []
    for response in responses:
        fragments.extend(extract_texts(response))
    merged_text = wrap_fence("\n".join(fragments))

    target = next(iter(_content_items(merged)), None)
    if target is not None:
        target["text"] = merged_text
    else:
        log.warning("First response has no content item – merged text kept in output_text only")

    if "output_text" in merged:
        merged["output_text"] = merged_text

    merged["usage"] = _merge_usage(merged.get("usage"), responses)

    log.info(
        "Merged %d responses (%d text fragments, %s total tokens)",
        len(responses),
        len(fragments),
        merged["usage"].get("total_tokens"),
    )
    return merged
