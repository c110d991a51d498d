from __future__ import annotations

from pathlib import Path

from loguru import logger


def setup_file_logging(path: Path, level: str = "INFO") -> None:
    # Console output would draw over the TUI, so logs only go to a file.
    logger.remove()
    path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(path),
        level=level.upper(),
        rotation="1 MB",
        retention=3,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}",
    )
