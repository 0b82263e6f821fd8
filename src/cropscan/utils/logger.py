"""Structured logging configuration."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config import settings

_CONFIGURED = False


def _configure() -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    logger.remove()
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(sys.stderr, level="INFO")
    logger.add(
        log_dir / "cropscan.log",
        rotation="10 MB",
        retention="10 days",
        level="INFO",
    )
    _CONFIGURED = True


def get_logger(name: Optional[str] = None):
    _configure()
    return logger.bind(module=name or "cropscan")
