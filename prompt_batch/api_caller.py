"""Send records to the stored prompt through the OpenAI Responses API."""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import openai

from prompt_batch.config import Settings
from prompt_batch.logger import get_logger


log = get_logger(__name__)


INPUT_FORMATS = ("message", "raw")

# Ask the API to return the sources consulted by any web search tool call.
INCLUDE_FIELDS = ["web_search_call.action.sources"]


def build_client(settings: Settings) -> openai.OpenAI:
    """Return an OpenAI client bound to the configured API key."""

    return openai.OpenAI(api_key=settings.api_key)


def serialize_records(records: Sequence[Any]) -> str:
    return json.dumps(list(records), ensure_ascii=False, indent=2)


def build_input(payload: Optional[str], input_format: str = "message") -> Any:
    """Return the ``input`` argument for one request.

    ``None`` means a prompt-only call with an empty input list. Otherwise the
    JSON text is sent either as-is (``raw``) or wrapped in a single user
    message (``message``).
    """

    if payload is None:
        return []

    if input_format == "raw":
        return payload
    if input_format == "message":
        return [
            {
                "role": "user",
                "content": [{"type": "input_text", "text": payload}],
            }
        ]
    raise ValueError(f"Unknown input format {input_format!r}; expected one of {INPUT_FORMATS}")


def build_request(settings: Settings, input_value: Any) -> Dict[str, Any]:
    """Return the keyword arguments for ``client.responses.create``."""

    return {
        "prompt": {"id": settings.prompt_id, "version": settings.prompt_version},
        "input": input_value,
        "text": {"format": {"type": "text"}},
        "reasoning": {},
        "max_output_tokens": settings.max_output_tokens,
        "store": False,
        "include": list(INCLUDE_FIELDS),
    }


def _to_dict(response: Any) -> Dict[str, Any]:
    """Convert an SDK ``Response`` to a plain dict.

    ``output_text`` is a computed property on the SDK object and is not part
    of ``model_dump()``; it is copied over so the mirror field is kept.
    """

    if isinstance(response, dict):
        return response

    data = response.model_dump()
    output_text = getattr(response, "output_text", None)
    if isinstance(output_text, str):
        data.setdefault("output_text", output_text)
    return data


def _log_usage(label: str, data: Dict[str, Any]) -> None:
    usage = data.get("usage") or {}
    if not isinstance(usage, dict):
        return
    log.info(
        "%s usage – input=%s output=%s total=%s",
        label,
        usage.get("input_tokens"),
        usage.get("output_tokens"),
        usage.get("total_tokens"),
    )


def send_request(
    client: Any,
    settings: Settings,
    records: Optional[Sequence[Any]] = None,
    *,
    input_format: str = "message",
    label: str = "Request",
) -> Dict[str, Any]:
    """Issue one ``responses.create`` call and return the response as a dict.

    *records* ``None`` sends an empty input (prompt-only run). Errors are
    logged and re-raised; nothing is retried.
    """

    payload = serialize_records(records) if records is not None else None
    request = build_request(settings, build_input(payload, input_format))

    if payload is None:
        log.info("%s: sending prompt %s (version %s) with empty input", label, settings.prompt_id, settings.prompt_version)
    else:
        log.info("%s: sending %d records (%d chars)", label, len(records), len(payload))

    started = time.perf_counter()
    try:
        response = client.responses.create(**request)
    except Exception as exc:
        status = getattr(exc, "status_code", None)
        if status is not None:
            log.error("%s failed (HTTP %s): %s", label, status, exc)
        else:
            log.error("%s failed: %s", label, exc)
        raise

    data = _to_dict(response)
    log.info("%s: response received in %.2fs", label, time.perf_counter() - started)
    _log_usage(label, data)
    return data


def send_batches(
    client: Any,
    settings: Settings,
    batches: Sequence[Sequence[Any]],
    *,
    input_format: str = "message",
    sleep: Optional[Callable[[float], None]] = None,
) -> List[Dict[str, Any]]:
    """Send *batches* one after another and return the responses in order.

    Waits ``settings.batch_delay`` seconds between calls but not after the
    last one. The first failing batch aborts the whole sequence.
    """

    sleep = sleep or time.sleep
    total = len(batches)
    responses: List[Dict[str, Any]] = []

    for index, batch in enumerate(batches, 1):
        label = f"Batch {index}/{total}"
        log.info("%s (%d items)", label, len(batch))
        responses.append(send_request(client, settings, batch, input_format=input_format, label=label))

        if index < total:
            log.info("Waiting %.1fs before next batch", settings.batch_delay)
            sleep(settings.batch_delay)

    log.info("All %d batches completed", total)
    return responses
