"""Logging and console status output."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

APP_LOGGER = "heartrate_osc"
VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the relay.

    Args:
        level: Log level name, case-insensitive. Unknown names fall back to INFO.
    """
    level_upper = level.upper()
    invalid_level = None
    if level_upper not in VALID_LEVELS:
        invalid_level = level
        level_upper = "INFO"

    # Root stays at WARNING so bleak's backend chatter is hidden.
    # Logs go to stderr, the status line owns stdout.
    logging.basicConfig(
        level=logging.WARNING,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stderr,
        force=True,
    )

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(getattr(logging, level_upper))

    if invalid_level:
        app_logger.warning("Unknown log level '%s', defaulting to INFO", invalid_level)


def show_status(text: str) -> None:
    """Rewrite the single-line status display on stdout."""
    sys.stdout.write(f"\rStatus -> {text}   ")
    sys.stdout.flush()
