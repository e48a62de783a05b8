"""Logger configuration for the prompt ledger.

Console output is colorized for operators. The optional file sink keeps the
bound context (partition_key, version, author_id, attempt) of every record so
a save can be traced across retries.
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {extra} | {message}"


def setup_logger(
    level: str = "INFO",
    log_file: str | Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Replace loguru sinks with the ledger's console and file sinks.

    Args:
        level: Minimum level for both sinks
        log_file: Path of the ledger log file; console only when None
        rotation: When the file sink rolls over (e.g., "10 MB", "1 day")
        retention: How long rolled files are kept (e.g., "7 days")
    """
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
        )
        logger.bind(log_file=str(log_path)).debug("Ledger file logging enabled")

    logger.debug(f"Logger configured at {level}")
