"""
Logger setup shared by the API and the scripts.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

from core.config import LOG_DIR, LOG_LEVEL, LOG_TO_FILE

ROOT_LOGGER_NAME = "salon_schedule"


def setup_logger(name: str = ROOT_LOGGER_NAME, level: str | None = None) -> logging.Logger:
    """
    Configure a logger with a console handler and, if enabled, a rotating file.

    Calling this twice for the same name returns the already-configured logger.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    log_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    logger.setLevel(log_level)

    simple_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(simple_formatter)
    console_handler.setLevel(log_level)
    logger.addHandler(console_handler)

    if LOG_TO_FILE:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_DIR / f"{name}.log",
            maxBytes=10485760,  # 10MB
            backupCount=5,
        )
        file_handler.setFormatter(detailed_formatter)
        file_handler.setLevel(log_level)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Child logger under the project root logger, e.g. salon_schedule.services.scheduling."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")
