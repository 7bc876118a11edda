"""
Logging configuration using loguru.

Provides structured logging with JSON output for machine consumption
and pretty-printed output for interactive use. Logs go to stderr so
query results written to stdout stay clean.
"""

import sys

from loguru import logger


def _text_formatter(record: dict) -> str:
    """Format log record for text output, conditionally showing extras.

    Only includes the {extra} section if it contains data, preventing
    empty braces from appearing in logs.
    """
    base_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    # Only append extra if it has content
    if record["extra"]:
        base_format += " | {extra}"

    return base_format + "\n{exception}"


def setup_logging(level: str = "INFO", log_format: str = "text") -> None:
    """Configure loguru logger.

    Args:
        level: Minimum level to emit (debug, info, warning, error)
        log_format: "text" for colourised human output, "json" for one
            JSON object per line
    """

    # Remove default logger
    logger.remove()

    level = level.upper()

    if log_format.lower() == "text":
        logger.add(
            sys.stderr,
            format=_text_formatter,
            level=level,
            colorize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level=level,
            serialize=True,  # JSON output
        )

    logger.debug(f"Logging configured (level={level}, format={log_format})")
