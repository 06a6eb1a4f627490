"""Logging setup for the command line: rich-formatted output on stderr."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the ``fluxcode`` logger.

    Args:
        verbose: Enable DEBUG level logging.
        quiet: Suppress all but ERROR level logging.
        log_file: Optional file path to append plain-text logs to.

    Returns:
        The configured package logger.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handlers: list = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_time=verbose,
            show_path=verbose,
            markup=False,
        )
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logger = logging.getLogger("fluxcode")
    for old in logger.handlers:
        old.close()
    logger.handlers.clear()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
