import os
import logging
from logging.handlers import RotatingFileHandler


LOG_FILE_NAME = "prompt_batch.log"


def _logs_dir() -> str:
    """Return the directory that receives the rotating log file."""

    override = os.getenv("PROMPT_BATCH_LOG_DIR")
    if override:
        return override
    return os.path.join(os.getcwd(), "logs")


def _build_handler(logs_dir: str) -> RotatingFileHandler:
    """Create a rotating file handler (10 MB * 5 backups)."""

    file_path = os.path.join(logs_dir, LOG_FILE_NAME)
    handler = RotatingFileHandler(
        file_path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def get_logger(name: str) -> logging.Logger:
    """Return a module-level logger configured for the prompt runner.

    The first call for *name* creates the logs directory (``logs/`` under the
    working directory unless ``PROMPT_BATCH_LOG_DIR`` points elsewhere), attaches a
    rotating file handler and a console handler. Later calls return the same
    logger without adding duplicate handlers.
    """

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logs_dir = _logs_dir()
    os.makedirs(logs_dir, exist_ok=True)

    logger.setLevel(logging.INFO)
    logger.addHandler(_build_handler(logs_dir))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    )
    logger.addHandler(console_handler)

    # Avoid double logging if the root logger is configured elsewhere.
    logger.propagate = False

    return logger
