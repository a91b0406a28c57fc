from __future__ import annotations

import sys
from typing import Optional

from loguru import logger

from .config import get_config

_LOG_FILE = "orderslip.log"
_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)


def configure_logging(level: Optional[str] = None) -> None:
    """Install the console and file sinks. Safe to call more than once."""
    from .data.database import get_storage_root

    log_level = (level or get_config().log_level).upper()
    logger.remove()
    logger.configure(extra={"name": "orderslip"})
    logger.add(sys.stderr, level=log_level, format=_FORMAT)
    logger.add(
        get_storage_root() / _LOG_FILE,
        level=log_level,
        format=_FORMAT,
        rotation="1 MB",
        retention=5,
        encoding="utf-8",
    )


def get_logger(name: Optional[str] = None):
    """Return the shared loguru logger bound to ``name``."""
    return logger.bind(name=name or "orderslip")
