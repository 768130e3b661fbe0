"""
Logging configuration for lvs.

Diagnostics always go to stderr; stdout is reserved for scan results.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

# Libraries that log each OSV request at INFO
QUIET_LOGGERS = ("httpx", "httpcore")

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_level(level: Union[str, int]) -> int:
    """Turn 'debug', 'INFO' or 10 into a logging level, defaulting to INFO."""
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def _stderr_handler() -> logging.Handler:
    # messages are plain text, never rich markup
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
        enable_link_path=False,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(level: Union[str, int] = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Configure the root logger for a CLI run.

    Replaces any handlers already installed, so calling it twice does not
    duplicate output.

    Args:
        level: Logging level name or number
        log_file: Optional file that receives the same records
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(resolve_level(level))
    root_logger.handlers.clear()

    root_logger.addHandler(_stderr_handler())
    if log_file:
        root_logger.addHandler(_file_handler(log_file))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
