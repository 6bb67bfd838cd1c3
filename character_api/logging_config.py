"""Process-wide logging setup for the characters service.

Everything goes to stdout; set LOG_FILE_PATH to also append to a file that
survives logrotate (WatchedFileHandler reopens it after rotation).

Env:
    LOG_LEVEL       root level name (default "INFO")
    LOG_FILE_PATH   optional file to mirror the console output into
"""

import os
import logging
import logging.config
from pathlib import Path
from typing import Dict, Any

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Third-party loggers that otherwise keep their own levels
ALIGNED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")

_configured = False  # idempotency guard


def _build_dict_config(log_file: str | None, level: str) -> Dict[str, Any]:
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": "std",
        }
    }
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.WatchedFileHandler",
            "filename": log_file,
            "formatter": "std",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"std": {"format": LOG_FORMAT}},
        "handlers": handlers,
        "root": {"level": level, "handlers": list(handlers)},
    }


def configure_logging() -> None:
    """Apply the dictConfig once per process.

    Safe to call from every module import and every uvicorn worker.
    """
    global _configured
    if _configured:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.config.dictConfig(
        _build_dict_config(os.getenv("LOG_FILE_PATH") or None, level)
    )
    for name in ALIGNED_LOGGERS:
        logging.getLogger(name).setLevel(level)

    _configured = True
