# ============================================
#   Aesthetic Chat — Central logger
# ============================================

import os
import logging
from logging.handlers import TimedRotatingFileHandler

from aesthetic.config import LOG_DIR, LOG_FILE, IS_PROD


# --------------------------------------------
#   Logger identity (overrideable by env)
# --------------------------------------------

# Global app logger name
ROOT_LOGGER_NAME = os.getenv("AESTHETIC_LOGGER_NAME", "aesthetic")

# Log level (INFO by default)
LOG_LEVEL = os.getenv("AESTHETIC_LOG_LEVEL", "INFO").upper()


def _configure_root_logger() -> logging.Logger:
    """
    Configure the root Aesthetic logger once (idempotent).
    Uses a daily rotating file, keeps 30 days of history.
    In dev, records are also echoed to the console.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    # Prevent duplicate handlers on hot reload / multiple imports
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    os.makedirs(LOG_DIR, exist_ok=True)

    handler = TimedRotatingFileHandler(
        LOG_FILE,
        when="midnight",
        backupCount=30,
        encoding="utf-8",
        utc=False,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    if not IS_PROD:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    logger.propagate = False  # prevent double logging to root

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """
    Return a child logger for a given module name.
    Example: get_logger("protocol") → aesthetic.protocol
    """
    root = _configure_root_logger()
    return root.getChild(module_name)


def log_debug(module: str, message: str):
    get_logger(module).debug(message)


def log_info(module: str, message: str):
    get_logger(module).info(message)


def log_warning(module: str, message: str):
    get_logger(module).warning(message)


def log_exception(module: str, message: str):
    """
    Log an exception with traceback. To be used inside except blocks.
    """
    get_logger(module).exception(message)
