"""Logging configuration for secret-item."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_path: Path, *, verbose: bool = False) -> None:
    """Configure the package logger.

    Every record goes to a rotating log file. With ``verbose``, DEBUG records (each D-Bus call and
    signal) are mirrored to stderr as well.

    Idempotent: skips if handlers are already attached.
    """
    root = logging.getLogger("secret_item")
    if root.handlers:
        return

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    root.addHandler(file_handler)

    if verbose:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(logging.Formatter(fmt="%(levelname)s %(name)s: %(message)s"))
        root.addHandler(stream_handler)

    root.setLevel(logging.DEBUG)
