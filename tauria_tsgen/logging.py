"""Logging setup and diagnostic reporting for tauria-tsgen runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Tuple

from .diagnostics import Diagnostic

_LOGGER_NAME = "tauria_tsgen"
_CONSOLE_FORMAT = "[tauria-tsgen] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``tauria_tsgen`` hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def _console_level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install the console handler and, optionally, a file handler.

    ``quiet`` limits the console to warnings and errors. The log file always
    records per-file detail at DEBUG, whatever the console shows.
    """
    console_level = _console_level(verbose, quiet)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else console_level)
    logger.propagate = False

    # Reset handlers so a second invocation in one process does not log twice.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def log_diagnostics(
    diagnostics: Iterable[Diagnostic], logger: logging.Logger | None = None
) -> Tuple[int, int]:
    """Report each diagnostic at ERROR or WARNING; return ``(errors, warnings)``."""
    target = logger or get_logger("diagnostics")
    error_count = warning_count = 0
    for diagnostic in diagnostics:
        if diagnostic.is_error:
            error_count += 1
            target.error("%s", diagnostic.format())
        else:
            warning_count += 1
            target.warning("%s", diagnostic.format())
    return error_count, warning_count


__all__ = ["configure_logging", "get_logger", "log_diagnostics"]
