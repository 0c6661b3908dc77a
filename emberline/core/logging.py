"""
Emberline - Logging Configuration
Root logging setup shared by the API, the zone monitor and scripts.
"""

import logging
import sys
from functools import lru_cache
from typing import Optional

from emberline.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_logging(level: Optional[str] = None, format_string: Optional[str] = None) -> logging.Logger:
    """
    Configure stdout logging and return the "emberline" logger.

    Args:
        level: Level name, defaults to settings.log_level
        format_string: Record format, defaults to LOG_FORMAT
    """
    numeric_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format=format_string or LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger("emberline")
    logger.setLevel(numeric_level)
    return logger


@lru_cache()
def get_logger(name: str = "emberline") -> logging.Logger:
    return logging.getLogger(name)
