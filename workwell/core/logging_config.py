"""Logging configuration using loguru."""
from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger


def setup_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def add_file_sink(logs_dir: Path, level: str = "INFO") -> int:
    """Add a rotating file sink under ``logs_dir`` and return its handler id."""
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logger.add(
        logs_dir / "workwell.log",
        level=level,
        rotation="5 MB",
        retention="7 days",
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )
