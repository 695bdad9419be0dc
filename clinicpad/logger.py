import logging
import os
import sys

from dotenv import load_dotenv
from loguru import logger

load_dotenv(override=True)

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


class InterceptHandler(logging.Handler):
    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str | None = None) -> None:
    """Send loguru output to stderr and route stdlib logging through it."""
    logger.remove()

    log_level = (level or os.environ.get("CLINICPAD_LOG_LEVEL", "INFO")).upper()

    logger.add(sys.stderr, format=LOG_FORMAT, level=log_level)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
