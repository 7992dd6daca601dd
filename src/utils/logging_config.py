# src/utils/logging_config.py
"""
Logging setup for the Streamlit app and the FastAPI gateway.

Env:
  LOG_LEVEL=INFO|DEBUG|WARNING|...
  LOG_FORMAT=detailed|simple
  ENABLE_FILE_LOGGING=0|1   (writes logs/medtools.log)
  LOG_FILE_DIR=logs
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"

NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "hpack", "watchdog")

_configured = False


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None, *, force: bool = False) -> None:
    """Configure the root logger once (Streamlit reruns the script on every interaction)."""
    global _configured
    if _configured and not force:
        return

    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    fmt = fmt or os.getenv("LOG_FORMAT", "detailed")
    formatter = logging.Formatter(
        SIMPLE_FORMAT if fmt == "simple" else DETAILED_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if os.getenv("ENABLE_FILE_LOGGING", "0").lower() in ("1", "true", "yes", "y"):
        log_dir = Path(os.getenv("LOG_FILE_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "medtools.log", maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
