"""Logging setup for pipeline runs.

The engine streams module stderr back to the caller, so all pipeline
logging goes to a single stderr handler on the package logger.
"""

import logging
import sys

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach the stderr handler to the package logger once."""
    logger = logging.getLogger("score_server_pipeline")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
