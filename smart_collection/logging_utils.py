"""Logging helpers for collections."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def setup_collection_logger(
    name: str,
    level: int | str = logging.INFO,
    *,
    log_file: str | os.PathLike[str] | None = None,
) -> logging.Logger:
    """
    Configure a dedicated logger for one collection.
    Logs go to stderr and, when `log_file` is given, to a UTF-8 file as well.
    """

    logger = logging.getLogger(f"smart_collection.{name}")
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        directory = os.path.dirname(os.fspath(log_file))
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    logger.debug("Collection logging initialized for %s", name)
    return logger
