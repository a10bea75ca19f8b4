"""Logging setup shared by the API server and the maintenance CLI."""

import logging
import sys

from datacollections.config import StoreConfig

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Third-party loggers that are chatty at INFO/DEBUG
_QUIET_LOGGERS = ("aiosqlite", "multipart", "python_multipart")


def setup_logging(store: StoreConfig, verbose: bool = False) -> logging.Logger:
    """Send logs to stdout and, when ``store.log_file`` is set, to that file.

    ``verbose`` forces DEBUG for a single CLI run without touching the
    configured level. Python warnings (openpyxl emits some for odd
    workbooks) are routed through logging.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if store.log_file:
        store.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(store.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, store.log_level),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )
    logging.captureWarnings(True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger("datacollections")
