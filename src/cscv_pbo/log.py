"""Logger setup for command line use."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from cscv_pbo import config


def get_logger(name: str = "cscv_pbo", level: str | None = None) -> logging.Logger:
    """Return the package logger, attaching handlers on first use.

    Console output goes to stderr. If ``CSCV_PBO_LOG_FILE`` is set, records
    are also written to a rotating file.
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if logger.handlers:
        return logger

    if level is None:
        logger.setLevel(getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(fmt)
    logger.addHandler(stream_handler)

    if config.LOG_FILE:
        log_dir = os.path.dirname(config.LOG_FILE)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(config.LOG_FILE, maxBytes=10_485_760, backupCount=5)
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

    return logger
