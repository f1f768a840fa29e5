import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

# Where logs live (overridable so tests and deployments can redirect them)
LOG_DIR = Path(os.getenv("PROFILE_RAG_LOG_DIR", "logs"))

APP_LOG_PATH = LOG_DIR / "app.log"
ERR_LOG_PATH = LOG_DIR / "error.log"

# One global logger for the whole package
LOGGER_NAME = "profile_rag"

FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger() -> logging.Logger:
    """
    Returns a configured singleton logger.
    Safe to call from anywhere.
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Already configured, just return it
    if logger.handlers:
        return logger

    LOG_DIR.mkdir(parents=True, exist_ok=True)

    logger.setLevel(logging.DEBUG)  # capture everything; handlers will filter

    # --- Console handler (pretty, colored via rich) ---
    console_handler = RichHandler(
        rich_tracebacks=True,
        show_time=True,
        show_path=False,
        markup=False,  # chunk text and questions may contain [brackets]
    )
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(message)s"))

    # --- Rotating file handler for all logs (DEBUG+) ---
    file_handler = RotatingFileHandler(
        APP_LOG_PATH,
        maxBytes=5 * 1024 * 1024,  # ~5MB per file
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    # --- Rotating file handler for ERROR+ only ---
    err_handler = RotatingFileHandler(
        ERR_LOG_PATH,
        maxBytes=2 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    err_handler.setLevel(logging.ERROR)
    err_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)
    logger.addHandler(err_handler)

    # Don't propagate to root logger (avoids double-printing)
    logger.propagate = False

    logger.debug("Logger initialized. APP_LOG_PATH=%s ERR_LOG_PATH=%s", APP_LOG_PATH, ERR_LOG_PATH)

    return logger
