"""Logging setup shared by the CLI and tests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from crank.utils.json_formatter import JSONFormatter


def setup_logger(
    name: Optional[str] = "crank",
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    json_format: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Set up a logger with consistent formatting.

    Human-readable output goes through rich on stderr so that stdout stays
    clean for command results. ``json_format`` swaps in one JSON object per
    line instead.

    Args:
        name: Logger name (defaults to the ``crank`` package logger)
        level: Logging level (e.g., logging.INFO or "INFO")
        log_file: Optional file to append logs to
        json_format: Emit JSON lines instead of rich output
        console: Console to render to (defaults to a stderr console)

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers.clear()
    logger.propagate = False

    if json_format:
        stream_handler: logging.Handler = logging.StreamHandler()
        stream_handler.setFormatter(JSONFormatter())
    else:
        stream_handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            markup=False,
        )
        stream_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    stream_handler.setLevel(level)
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setLevel(level)
        if json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            ))
        logger.addHandler(file_handler)

    return logger
