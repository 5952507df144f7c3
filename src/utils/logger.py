"""Logging setup shared by every frontier module.

Loggers live under the ``frontier.`` namespace and write to stderr so that
JSON printed by the CLI on stdout stays machine-readable.  Set
``FRONTIER_LOG_FILE`` to also append records to a file.
"""

import logging
import os
import sys

NAMESPACE = "frontier"
_FORMAT = "%(asctime)s | %(name)-22s | %(levelname)-7s | %(message)s"


def setup_logger(name: str = NAMESPACE, level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """Return the namespaced logger *name*, attaching handlers on first use."""
    if name != NAMESPACE and not name.startswith(NAMESPACE + "."):
        name = f"{NAMESPACE}.{name}"
    logger = logging.getLogger(name)
    if not logger.handlers:
        fmt = logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(fmt)
        logger.addHandler(handler)

        log_file = log_file or os.getenv("FRONTIER_LOG_FILE")
        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(fmt)
            logger.addHandler(file_handler)
        # Each module logger has its own handlers; don't double-print via parent.
        logger.propagate = False
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger
