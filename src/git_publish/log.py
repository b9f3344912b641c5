"""Logging configuration for the git-publish command line."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from git_publish.ui import err_console

LOGGER_NAME = "git_publish"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stderr RichHandler to the package logger.

    Args:
        verbose: Log every subprocess at DEBUG instead of only warnings

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
