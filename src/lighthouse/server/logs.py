"""Append-only error log file for the ``lighthouse`` logger tree.

Every ``lighthouse.*`` logger propagates here, so request failures,
data-layer errors and migration reports all land in one file as
``[YYYY-mm-dd HH:MM:SS] message`` lines.
"""

import logging
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_file_logging(path: str | Path, level: int = logging.INFO) -> logging.Handler:
    """Attach a file handler for *path* to the ``lighthouse`` logger.

    Idempotent per path: calling it twice returns the existing handler.
    """
    target = Path(path).resolve()
    root = logging.getLogger("lighthouse")
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == target:
            return handler

    target.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(target, mode="a", encoding="utf-8", delay=True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(level)
    root.addHandler(handler)
    if root.level == logging.NOTSET or root.level > level:
        root.setLevel(level)
    return handler
