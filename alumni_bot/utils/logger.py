# Role: Logging setup for the bot. One "alumni_bot" logger writes to stdout;
# modules ask for children via get_logger(__name__-like short names).

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

logger = logging.getLogger("alumni_bot")

if not logger.handlers:
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(_handler)
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

# Prevent duplicate lines through the root logger.
logger.propagate = False


def configure(level: str) -> None:
    # Called after config.load_env() so DEBUG / LOG_LEVEL from .env take effect.
    logger.setLevel(level.upper())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if name:
        return logging.getLogger(f"alumni_bot.{name}")
    return logger
