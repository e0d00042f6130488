"""
Engine Logging
==============
One named logger per module, obtained with get_logger(__name__).

Console output goes to stderr at WARNING and above (critical concentration
risks), colored by level. `wealth -v` lowers that to INFO (completed passes),
`-vv` to DEBUG (computation steps). Setting WEALTH_LOG_DIR adds a plain-text
daily log file per module under that directory; without it nothing is
written to disk.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import functools
import time


LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_DIR_ENV = 'WEALTH_LOG_DIR'


# ================================================================================
# FORMATTING
# ================================================================================

class ColoredFormatter(logging.Formatter):
    """Level name wrapped in an ANSI color, for terminals."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        # File handlers share the record and must keep plain text
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname)
        if color:
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


# ================================================================================
# SETUP
# ================================================================================

def _file_handler(name: str, log_dir: str) -> logging.FileHandler:
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime('%Y%m%d')
    handler = logging.FileHandler(directory / f"{name.replace('.', '_')}_{stamp}.log", encoding='utf-8')
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logger(name: str, console_level: int = logging.WARNING,
                 log_dir: Optional[str] = None) -> logging.Logger:
    """
    (Re)build the handlers of logger `name`.

    The logger itself passes everything; handlers do the filtering. Calling
    this twice for the same name replaces the handlers instead of stacking
    duplicates.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(ColoredFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console)

    if log_dir:
        logger.addHandler(_file_handler(name, log_dir))

    return logger


def set_console_level(level: int, prefix: str = "wealth_engine") -> None:
    """Change the console threshold of every engine logger already created."""
    for name, logger in logging.Logger.manager.loggerDict.items():
        if not name.startswith(prefix) or not isinstance(logger, logging.Logger):
            continue
        for handler in logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)


def get_logger(module_name: str) -> logging.Logger:
    return setup_logger(module_name, log_dir=os.environ.get(LOG_DIR_ENV) or None)


# ================================================================================
# TIMING
# ================================================================================

def log_performance(logger: logging.Logger):
    """
    Decorator timing a call: INFO with the elapsed time on success, ERROR
    (then re-raise) on failure.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            logger.debug(f"Starting {func.__name__}")
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                logger.error(f"{func.__name__} failed after {time.perf_counter() - start:.3f}s: {exc}")
                raise
            logger.info(f"{func.__name__} finished in {time.perf_counter() - start:.3f}s")
            return result

        return wrapper
    return decorator
