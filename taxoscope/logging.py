"""Centralized logging configuration for taxoscope."""

import logging
import os


def setup_logging() -> None:
    """
    Configure application-wide logging using LOG_LEVEL environment variable.

    Defaults to INFO if LOG_LEVEL is not set.
    """
    # Get log level from environment variable
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    # Convert string to logging constant (will raise AttributeError if invalid)
    numeric_level = getattr(logging, log_level)

    # Configure root logger
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,  # Override any existing configuration
    )

    # Only echo generated SQL when explicitly debugging
    sqlalchemy_level = (
        logging.WARNING if numeric_level > logging.DEBUG else numeric_level
    )
    logging.getLogger("sqlalchemy.engine").setLevel(sqlalchemy_level)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {log_level} level")
