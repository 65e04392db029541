import logging
import os
from typing import Optional

__all__ = ["LOG_LEVEL_ENV", "configure_logging", "get_logger"]

LOG_LEVEL_ENV = "FA_ENGINE_LOG_LEVEL"
_DEFAULT_FORMAT = "%(levelname)s | %(name)s | %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure stdlib logging once.

    Respects env var FA_ENGINE_LOG_LEVEL if `level` is None.
    """
    lvl = (level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    level = getattr(logging, lvl, logging.WARNING)
    logging.basicConfig(level=level, format=_DEFAULT_FORMAT)
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger("fa_engine").setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
