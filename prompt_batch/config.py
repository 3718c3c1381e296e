"""Runtime configuration read from the environment (and an optional .env)."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from prompt_batch.errors import ConfigError


# Version of the stored prompt referenced by every request.
PROMPT_VERSION = "25"

MAX_OUTPUT_TOKENS = 16384

# Throttling policy for batch mode.
BATCH_SIZE = 100
BATCH_DELAY_SECONDS = 1.0

DEFAULT_DATA_DIR = "data"
DEFAULT_OUTPUT_DIR = "output"


@dataclass(frozen=True)
class Settings:
    api_key: str
    prompt_id: str
    prompt_version: str = PROMPT_VERSION
    max_output_tokens: int = MAX_OUTPUT_TOKENS
    batch_size: int = BATCH_SIZE
    batch_delay: float = BATCH_DELAY_SECONDS


def load_settings(
    *,
    batch_size: int = BATCH_SIZE,
    batch_delay: float = BATCH_DELAY_SECONDS,
    env_file: str | None = None,
) -> Settings:
    """Return :class:`Settings` built from ``OPENAI_API_KEY`` and ``PROMPT_ID``.

    Variables already exported take precedence over values in the ``.env``
    file. Raises :class:`ConfigError` naming every missing variable.
    """

    load_dotenv(env_file)

    api_key = (os.getenv("OPENAI_API_KEY") or "").strip()
    prompt_id = (os.getenv("PROMPT_ID") or "").strip()

    missing = [
        name
        for name, value in (("OPENAI_API_KEY", api_key), ("PROMPT_ID", prompt_id))
        if not value
    ]
    if missing:
        raise ConfigError(f"Missing required environment variable(s): {', '.join(missing)}")

    return Settings(
        api_key=api_key,
        prompt_id=prompt_id,
        batch_size=batch_size,
        batch_delay=batch_delay,
    )
