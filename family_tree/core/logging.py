from __future__ import annotations

import sys

from loguru import logger

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Route loguru output to stderr at ``level``. Safe to call more than once."""
    global _configured
    if _configured:
        return
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} - {message}",
    )
    _configured = True
