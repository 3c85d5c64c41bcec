# pyrobustid/logging.py
import logging

from logging import DEBUG, INFO, WARNING, ERROR, CRITICAL

__all__ = [
    "logger",
    "get_logger",
    "set_log_level",
    "set_log_handlers",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

PACKAGE = "pyrobustid"


def get_logger(name: str = None) -> logging.Logger:
    """Return the package logger or one of its children (``pyrobustid.<name>``)."""
    if name is None or name == PACKAGE:
        return logging.getLogger(PACKAGE)
    if name.startswith(PACKAGE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE}.{name}")


def set_log_handlers(handler: logging.Handler = None, to_file: str = None) -> None:
    """Replace the package handlers with a stream handler (or `handler`).

    If `to_file` is given, a file handler with the same format is added.
    """
    logger_ = logging.getLogger(PACKAGE)
    for h in list(logger_.handlers):
        logger_.removeHandler(h)

    fmt = "%(name)s:%(levelname)s %(message)s"
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=fmt))
    logger_.addHandler(handler)

    if to_file is not None:
        fh = logging.FileHandler(to_file, mode="w")
        fh.setFormatter(logging.Formatter(fmt=fmt))
        logger_.addHandler(fh)


def set_log_level(level) -> None:
    """Set the log level for the whole package.

    Args:
        level: A logging level (``pyrobustid.logging.DEBUG`` etc.) or its name.
    """
    logging.getLogger(PACKAGE).setLevel(level)


logger = logging.getLogger(PACKAGE)
logger.addHandler(logging.NullHandler())
