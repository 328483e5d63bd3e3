import logging
import sys

from app.core.config import settings


def _configure_logger() -> logging.Logger:
    logger = logging.getLogger("gymbro.api")
    if not logger.handlers:
        logger.setLevel(settings.LOG_LEVEL.upper())
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    return logger


logger = _configure_logger()
