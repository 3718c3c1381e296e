"""
Shared fixtures: isolated environment, settings, fake OpenAI client, log capture.
"""

import logging
import os
import tempfile
from unittest.mock import MagicMock

import pytest

# Loggers are configured at import time; keep their files out of the package.
os.environ.setdefault("PROMPT_BATCH_LOG_DIR", tempfile.mkdtemp(prefix="prompt_batch_logs_"))

from prompt_batch.config import Settings  # noqa: E402
from tests.helpers import make_response  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch):
    """Drop real credentials and stop .env files from leaking into tests."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("PROMPT_ID", raising=False)
    monkeypatch.setattr("prompt_batch.config.load_dotenv", lambda *_args, **_kwargs: False)


@pytest.fixture
def settings():
    return Settings(api_key="sk-test", prompt_id="pmpt_test")


@pytest.fixture
def configured_env(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("PROMPT_ID", "pmpt_test")


@pytest.fixture
def fake_client():
    """OpenAI client stand-in answering every call with a fenced batch marker."""
    client = MagicMock()
    calls = []

    def _create(**kwargs):
        calls.append(kwargs)
        return make_response(f"```\nbatch {len(calls)}\n```")

    client.responses.create.side_effect = _create
    client.calls = calls
    return client


@pytest.fixture
def capture_logs(caplog):
    """Attach caplog to the package loggers, which do not propagate."""
    attached = []

    def _capture(name):
        logger = logging.getLogger(name)
        logger.addHandler(caplog.handler)
        attached.append(logger)
        return caplog

    yield _capture

    for logger in attached:
        logger.removeHandler(caplog.handler)
