from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from . import config

LOG_FILE_NAME = "nav.log"
FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def log_file(log_dir: Optional[Path] = None) -> Path:
    """Log file under ``log_dir``, or under the app home's ``logs`` directory."""
    return Path(log_dir or config.APP_DIR / "logs") / LOG_FILE_NAME


def setup_logging(verbose: bool = False, log_dir: Optional[Path] = None) -> Path:
    path = log_file(log_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger("chatter_nav")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    formatter = logging.Formatter(FORMAT)
    handler = RotatingFileHandler(path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    if verbose:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        logger.addHandler(stream)
        logger.debug("Logging to %s", path)
    return path


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or "chatter_nav")
