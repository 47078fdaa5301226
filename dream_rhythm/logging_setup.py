import os
import logging
from logging.handlers import RotatingFileHandler

from .config import LOG_FILE
from .utils import ensure_dir

LOGGER_NAME = "DreamRhythm"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def setup_logger(log_file: str = LOG_FILE, debug: bool | None = None) -> logging.Logger:
    """Return the app logger, attaching a rotating file handler once.

    Set DREAM_RHYTHM_DEBUG=1 to also echo DEBUG records to stderr.
    """
    if debug is None:
        debug = os.getenv("DREAM_RHYTHM_DEBUG", "") not in ("", "0")

    ensure_dir(os.path.dirname(log_file))
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not logger.handlers:
        fmt = logging.Formatter(LOG_FORMAT)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=1_000_000,
            backupCount=3,
            encoding="utf-8",
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)

        if debug:
            console = logging.StreamHandler()
            console.setFormatter(fmt)
            logger.addHandler(console)

    return logger
