import logging
from typing import Optional

from .config.settings import ClientSettings, get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(settings: Optional[ClientSettings] = None) -> logging.Logger:
    """Attach a stream handler to the package logger. Safe to call twice."""
    settings = settings or get_settings()
    level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL.upper()

    logger = logging.getLogger("workspace_sync")
    logger.setLevel(level)
    if not any(getattr(h, "_workspace_sync", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._workspace_sync = True
        logger.addHandler(handler)
    return logger
