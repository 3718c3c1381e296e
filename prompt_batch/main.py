"""Entry point that loads records, sends them to the stored prompt and saves the result.

Example usages:
    python -m prompt_batch                 # all records, batches of 100
    python -m prompt_batch --count=250     # first 250 records (3 batches)
    python -m prompt_batch --single        # all records in one request, JSON only
    python -m prompt_batch --prompt-only   # call the prompt with an empty input
"""


from __future__ import annotations

# ---------------------------------------------------------------------------
# Allow this file to be executed directly (`python prompt_batch/main.py`) as
# well as via `python -m prompt_batch`. When run directly the directory that
# contains the *prompt_batch* package is not on ``sys.path`` and the absolute
# imports below would fail, so prepend it before resolving them.
# ---------------------------------------------------------------------------

import os
import sys

_PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PARENT_DIR not in sys.path:
    sys.path.insert(0, _PARENT_DIR)

import argparse
import json
from typing import Any, Callable, Dict, Optional

import openai

from prompt_batch.api_caller import INPUT_FORMATS, build_client, send_batches, send_request
from prompt_batch.batcher import chunk
from prompt_batch.config import (
    BATCH_DELAY_SECONDS,
    BATCH_SIZE,
    DEFAULT_DATA_DIR,
    DEFAULT_OUTPUT_DIR,
    Settings,
    load_settings,
)
from prompt_batch.data_loader import load_records
from prompt_batch.errors import DataLoadError, PromptBatchError
from prompt_batch.logger import get_logger
from prompt_batch.merger import merge_responses
from prompt_batch.writer import save_results


log = get_logger(__name__)


MODES = ("batch", "single", "prompt")


def parse_count(value: Optional[str]) -> Optional[int]:
    """Return the ``--count`` value as a positive int, ``None`` when omitted."""

    if value is None:
        return None
    text = str(value).strip()
    if not text.isdigit() or int(text) <= 0:
        raise ValueError(f"--count must be a positive integer, got {value!r}")
    return int(text)


def _load_selection(data_dir: str, count: Optional[int]) -> list:
    records, file_count = load_records(data_dir)

    if count is not None:
        selected = records[:count]
        log.info("Processing %d of %d records (--count=%d)", len(selected), len(records), count)
    else:
        selected = records
        log.info("Processing all %d records", len(selected))

    if not selected:
        raise DataLoadError(f"No records to process in {data_dir} ({file_count} JSON files found)")
    return selected


# ----------------------------------------------------------------------------
# Public orchestration helper
# ----------------------------------------------------------------------------


def orchestrate(
    settings: Settings,
    *,
    mode: str = "batch",
    count: Optional[int] = None,
    data_dir: str = DEFAULT_DATA_DIR,
    output_dir: str = DEFAULT_OUTPUT_DIR,
    input_format: str = "message",
    client: Any = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> Dict[str, Any]:
    """Run one mode end to end and return ``{"response": ..., "paths": ...}``.

    Load, API and merge failures propagate to the caller. Only persistence
    is best-effort (see :func:`prompt_batch.writer.save_results`).
    """

    if mode not in MODES:
        raise ValueError(f"Unknown mode {mode!r}; expected one of {MODES}")

    if client is None:
        client = build_client(settings)

    # ---------------------------------------------------------------------
    # Prompt-only: no data, nothing persisted.
    # ---------------------------------------------------------------------

    if mode == "prompt":
        response = send_request(client, settings, None, label="Prompt")
        log.info("Response:\n%s", json.dumps(response, ensure_ascii=False, indent=2))
        return {"response": response, "paths": {}}

    # ---------------------------------------------------------------------
    # 1. Load and slice the records.
    # ---------------------------------------------------------------------

    log.info("Loading records from %s", data_dir)
    records = _load_selection(data_dir, count)

    # ---------------------------------------------------------------------
    # 2. Send them, either at once or in batches, and merge the replies.
    # ---------------------------------------------------------------------

    if mode == "single":
        response = send_request(client, settings, records, input_format=input_format, label="Request")
        paths = save_results(response, len(records), output_dir, write_text=False)
        return {"response": response, "paths": paths}

    batches = chunk(records, settings.batch_size)
    log.info(
        "Split %d records into %d batches of up to %d",
        len(records),
        len(batches),
        settings.batch_size,
    )

    responses = send_batches(client, settings, batches, input_format=input_format, sleep=sleep)
    merged = merge_responses(responses)

    # ---------------------------------------------------------------------
    # 3. Persist.
    # ---------------------------------------------------------------------

    paths = save_results(merged, len(records), output_dir)
    return {"response": merged, "paths": paths}


def _build_cli() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prompt-batch",
        description="Send JSON records to a stored OpenAI prompt and save the merged response",
    )
    # Validated in main(): a bad value must exit with 1, not argparse's 2.
    parser.add_argument("--count", metavar="N", help="Process only the first N records (default: all)")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--single",
        action="store_true",
        help="Send all records in a single request and write the JSON result only",
    )
    mode.add_argument(
        "--prompt-only",
        action="store_true",
        help="Call the prompt with an empty input and print the response",
    )

    parser.add_argument("--data-dir", default=DEFAULT_DATA_DIR, help="Input directory (default: %(default)s)")
    parser.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR, help="Output directory (default: %(default)s)")
    parser.add_argument(
        "--input-format",
        choices=INPUT_FORMATS,
        default="message",
        help="Send the records as a user message or as a raw JSON string (default: %(default)s)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=BATCH_SIZE,
        help="Records per request in batch mode (default: %(default)s)",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=BATCH_DELAY_SECONDS,
        help="Seconds to wait between batches (default: %(default)s)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = _build_cli().parse_args(argv)

    try:
        count = parse_count(args.count)
    except ValueError as exc:
        log.error("%s", exc)
        raise SystemExit(1) from exc

    if args.batch_size <= 0:
        log.error("--batch-size must be a positive integer, got %s", args.batch_size)
        raise SystemExit(1)

    if args.delay < 0:
        log.error("--delay must not be negative, got %s", args.delay)
        raise SystemExit(1)

    if args.prompt_only:
        mode = "prompt"
    elif args.single:
        mode = "single"
    else:
        mode = "batch"

    try:
        settings = load_settings(batch_size=args.batch_size, batch_delay=args.delay)
        result = orchestrate(
            settings,
            mode=mode,
            count=count,
            data_dir=args.data_dir,
            output_dir=args.output_dir,
            input_format=args.input_format,
        )
    except (PromptBatchError, openai.OpenAIError) as exc:
        log.error("Run failed: %s", exc)
        raise SystemExit(1) from exc
    except Exception as exc:  # noqa: BLE001
        log.exception("Unexpected error during %s run", mode)
        raise SystemExit(1) from exc

    log.info("Done (%s mode, %d file(s) written)", mode, len(result["paths"]))


if __name__ == "__main__":
    main()
