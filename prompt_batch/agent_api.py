"""Simplified entrypoints for callers that do not go through the CLI.

Each helper reads the configuration from the environment and forwards to
:func:`prompt_batch.main.orchestrate`, returning its result dict
(``{"response": ..., "paths": ...}``). Errors propagate instead of exiting.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from prompt_batch.config import BATCH_DELAY_SECONDS, BATCH_SIZE, load_settings
from prompt_batch.main import orchestrate


def run_batch(
    count: Optional[int] = None,
    *,
    batch_size: int = BATCH_SIZE,
    batch_delay: float = BATCH_DELAY_SECONDS,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Send records in batches, merge the replies and save JSON + CSV.

    Parameters
    ----------
    count:
        Number of leading records to process; ``None`` processes all.
    batch_size / batch_delay:
        Records per request and seconds to wait between requests.
    kwargs:
        Passed to :func:`orchestrate` (``data_dir``, ``output_dir``,
        ``input_format``, ``client``, ``sleep``).
    """

    settings = load_settings(batch_size=batch_size, batch_delay=batch_delay)
    return orchestrate(settings, mode="batch", count=count, **kwargs)


def run_single(count: Optional[int] = None, **kwargs: Any) -> Dict[str, Any]:
    """Send all (or the first *count*) records in one request and save JSON."""

    return orchestrate(load_settings(), mode="single", count=count, **kwargs)


def run_prompt_only(**kwargs: Any) -> Dict[str, Any]:
    """Call the stored prompt with an empty input."""

    return orchestrate(load_settings(), mode="prompt", **kwargs)
