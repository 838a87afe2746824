"""Centralized logging configuration for backlog access.

Logs are written to the console and, when QUASSELDB_LOG_DIR is set, to
rotating files.

Usage:
    from quasseldb.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("User authenticated", extra={'user_id': 3, 'db_type': 'pgsql'})
"""

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_DIR = os.getenv("QUASSELDB_LOG_DIR")
LOG_LEVEL = os.getenv("QUASSELDB_LOG_LEVEL", "INFO").upper()


class StructuredFormatter(logging.Formatter):
    """Formatter that adds context fields to log records.

    Supports the following context fields via extra={} parameter:
    - user_id: Bound Quassel user
    - db_type: Database backend (pgsql or sqlite)
    """

    def format(self, record):
        record.user_id = getattr(record, "user_id", None)
        record.db_type = getattr(record, "db_type", None)

        return super().format(record)


def get_logger(name: str) -> logging.Logger:
    """Get configured logger.

    Creates a logger with:
    - Console handler (QUASSELDB_LOG_LEVEL, default INFO)
    - Rotating file handler for all logs (DEBUG level) if QUASSELDB_LOG_DIR is set

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logging.Logger instance
    """
    logger = logging.getLogger(name)

    # Skip if already configured (prevents duplicate handlers)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    console = logging.StreamHandler()
    console.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    console.setFormatter(
        StructuredFormatter("[%(levelname)s] [user:%(user_id)s] %(message)s")
    )
    logger.addHandler(console)

    if LOG_DIR:
        os.makedirs(LOG_DIR, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(LOG_DIR, "quasseldb.log"),
            maxBytes=10 * 1024 * 1024,  # 10MB per file
            backupCount=10,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            StructuredFormatter(
                "[%(asctime)s] [%(levelname)s] [%(name)s] "
                "[user:%(user_id)s db:%(db_type)s] %(message)s"
            )
        )
        logger.addHandler(file_handler)

    return logger
