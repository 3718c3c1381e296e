"""Exceptions raised by the prompt runner.

API failures are not wrapped: the ``openai`` SDK errors propagate unchanged
and the CLI maps them to exit code 1 alongside the errors below.
"""


class PromptBatchError(RuntimeError):
    """Base class for fatal run errors."""


class ConfigError(PromptBatchError):
    """Raised when ``OPENAI_API_KEY`` or ``PROMPT_ID`` is not set."""


class DataLoadError(PromptBatchError):
    """Raised if the data directory cannot be read or a file is not JSON."""


class MergeError(PromptBatchError, ValueError):
    """Raised when asked to merge an empty list of responses."""
