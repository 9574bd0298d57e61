"""Heart rate file output for third-party tools."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def write_heart_rate_file(path: str | Path, heart_rate: int) -> None:
    """Overwrite the file with the decimal heart rate.

    Raises:
        OSError: If the file cannot be written
    """
    Path(path).write_text(str(heart_rate), encoding="ascii")
    logger.debug("Wrote %d to %s", heart_rate, path)
