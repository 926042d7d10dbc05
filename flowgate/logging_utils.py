# flowgate/logging_utils.py

import logging
import os
import sys

_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "flowgate") -> logging.Logger:
    """
    Logger writing to stdout, plus FLOWGATE_LOG_FILE when set.

    LOG_LEVEL sets the level. httpx request logging is held at
    HTTPX_LOG_LEVEL (default WARNING).
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    log_file = os.getenv("FLOWGATE_LOG_FILE")
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # handlers live here, not on root
    logger.propagate = False

    httpx_level = os.getenv("HTTPX_LOG_LEVEL", "WARNING").upper()
    logging.getLogger("httpx").setLevel(getattr(logging, httpx_level, logging.WARNING))
    return logger
