from __future__ import annotations

import os
import sys
from pathlib import Path

from loguru import logger

DEFAULT_LEVEL = "INFO"


def setup_logging(service: str, logs_dir: str | Path = "logs", level: str | None = None) -> Path:
    """
    Console sink at LOG_LEVEL (default INFO) plus a rotating JSON file sink
    logs/<service>.log. Returns the log file path.
    """
    lvl = (level or os.environ.get("LOG_LEVEL") or DEFAULT_LEVEL).upper()

    log_dir = Path(logs_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{service}.log"

    logger.remove()
    logger.configure(extra={"service": service})
    logger.add(sys.stderr, level=lvl)
    logger.add(
        log_path,
        level=lvl,
        rotation="10 MB",
        retention=5,
        serialize=True,
    )
    return log_path
