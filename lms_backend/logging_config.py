import logging
import sys

from lms_backend.config import LOG_FORMAT


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the root handler once and set the package log level.
    Safe to call more than once (e.g. on app reload).
    """
    root = logging.getLogger()
    if not any(getattr(h, "_lms_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._lms_handler = True
        root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("lms_backend").setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("lms_backend").info("Logging is set up (level=%s)", level)
    return root
