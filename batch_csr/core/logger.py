# batch_csr/core/logger.py
"""
Loggers for the batch CSR generator.

Every logger writes short lines to stdout and detailed lines (with the
calling function) to a shared rotating file, batch-csr.log.
"""
import sys
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from batch_csr.core.config import LOG_DIR, LOG_LEVEL

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

LOG_FILE_NAME = "batch-csr.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _log_dir() -> Path:
    log_dir = Path(LOG_DIR)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        log_dir = Path("./logs")
        log_dir.mkdir(exist_ok=True)
    return log_dir


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Return the named logger, attaching console and file handlers on first use.

    Args:
        name: dotted "csrbatch.*" name
        level: level name overriding LOG_LEVEL
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    effective_level = getattr(logging, level or LOG_LEVEL, logging.INFO)
    logger.setLevel(effective_level)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(effective_level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    try:
        file_handler = RotatingFileHandler(
            str(_log_dir() / LOG_FILE_NAME),
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
    except OSError as e:
        logger.warning(f"File logging disabled, console only: {e}")
    else:
        file_handler.setLevel(effective_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_api_logger() -> logging.Logger:
    return setup_logger("csrbatch.api")


def get_service_logger() -> logging.Logger:
    """Logger shared by range, subject, key, CSR and batch services."""
    return setup_logger("csrbatch.service")
