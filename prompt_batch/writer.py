"""Persist a (merged) response under the output directory."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, TextIO

from prompt_batch.config import DEFAULT_OUTPUT_DIR
from prompt_batch.logger import get_logger
from prompt_batch.merger import extract_texts


log = get_logger(__name__)


def file_stamp(now: Optional[datetime] = None) -> str:
    """Return a filename-safe UTC timestamp, e.g. ``2026-10-19T08-15-30-123Z``."""

    now = now or datetime.now(timezone.utc)
    iso = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def result_stem(item_count: int, now: Optional[datetime] = None) -> str:
    return f"result_{item_count}items_{file_stamp(now)}"


def save_results(
    response: Dict[str, Any],
    item_count: int,
    output_dir: str = DEFAULT_OUTPUT_DIR,
    *,
    write_text: bool = True,
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """Write *response* as JSON (and its texts as ``.csv``) and return the paths.

    The ``.csv`` file holds the fence-stripped texts joined by newlines and is
    skipped when there is no text. Write failures are logged, not raised.
    """

    written: Dict[str, str] = {}
    stem = result_stem(item_count, now)

    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError:
        log.exception("Unable to save results to %s", output_dir)
        return written

    json_path = os.path.join(output_dir, f"{stem}.json")
    if _write_file(json_path, lambda fh: json.dump(response, fh, ensure_ascii=False, indent=2)):
        written["json"] = json_path
        log.info("Response saved to %s", json_path)

    if not write_text:
        return written

    fragments = extract_texts(response)
    if not fragments:
        log.warning("Response contains no text – %s.csv not written", stem)
        return written

    text_path = os.path.join(output_dir, f"{stem}.csv")
    if _write_file(text_path, lambda fh: fh.write("\n".join(fragments))):
        written["csv"] = text_path
        log.info("Text output saved to %s", text_path)

    return written


def _write_file(path: str, dump: Callable[[TextIO], Any]) -> bool:
    """Run *dump* on *path* opened for writing; log and return False on failure."""

    try:
        with open(path, "w", encoding="utf-8") as fh:
            dump(fh)
    except (OSError, TypeError, ValueError):
        log.exception("Unable to save results to %s", path)
        return False
    return True
