import os
import logging
from logging.handlers import TimedRotatingFileHandler

LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

_formatter = logging.Formatter(
    "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    "%Y-%m-%d %H:%M:%S"
)


def get_logger(name: str = "studio"):
    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)

    if logger.handlers:
        return logger

    # Console (stdout)
    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(_formatter)
    logger.addHandler(console)

    # One file per logger, rotated at midnight, last 7 days kept
    os.makedirs(LOG_DIR, exist_ok=True)
    file_handler = TimedRotatingFileHandler(
        filename=os.path.join(LOG_DIR, f"{name}.log"),
        when="midnight",
        interval=1,
        backupCount=7,
        encoding="utf-8",
    )
    file_handler.suffix = "%Y-%m-%d"
    file_handler.setLevel(LOG_LEVEL)
    file_handler.setFormatter(_formatter)
    logger.addHandler(file_handler)

    # Records stay on this logger only
    logger.propagate = False
    return logger
