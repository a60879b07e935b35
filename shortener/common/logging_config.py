"""Logging setup for the shortener process."""

import json
import logging
import sys
from typing import Optional


ROOT_LOGGER_NAME = "shortener"

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; quotes and newlines in messages are escaped."""
    
    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log)


# Third-party loggers that are too chatty at DEBUG
QUIET_LOGGERS = ("asyncio", "asyncpg", "httpx", "httpcore")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> logging.Logger:
    """Configure the "shortener" logger tree.
    
    Every module logs through a child of this logger (shortener.web,
    shortener.deletion, ...), so handlers are attached here only.
    Calling it again replaces the previous handlers.
    
    Args:
        level: Logging level name; unknown names fall back to INFO
        log_file: Optional file that receives the same records as stdout
        json_format: Emit one JSON object per line
        
    Returns:
        The configured "shortener" logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    
    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)
    
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)
    for old in logger.handlers:
        old.close()
    logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
    
    return logger
