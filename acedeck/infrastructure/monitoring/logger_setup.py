"""Centralized logging configuration for the acedeck application.

Logs go to stderr so generated notes on stdout stay clean, with an optional
size-rotated log file. Chatty HTTP and SDK loggers are held at WARNING
unless acedeck itself runs at DEBUG.
"""

import logging
import logging.handlers
import sys
from typing import Iterable, Optional

DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_MAX_BYTES = 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3

# Third-party loggers that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "openai", "groq")


def _quiet(names: Iterable[str], level: int) -> None:
    for name in names:
        logging.getLogger(name).setLevel(level)


def _file_handler(log_file: str, formatter: logging.Formatter, log_level: int) -> Optional[logging.Handler]:
    try:
        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding='utf-8',
        )
    except OSError as e:
        logging.error(f"Failed to set up file logging to {log_file}: {e}", exc_info=True)
        return None
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = None,
) -> None:
    """Configures the root logger for the application.

    Args:
        log_level: The minimum logging level (e.g., logging.DEBUG, logging.INFO).
        log_format: The format string for log messages.
        log_file: Optional path of a rotating log file.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(log_format)
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(log_level)
    stderr_handler.setFormatter(formatter)
    root_logger.addHandler(stderr_handler)

    if log_file:
        file_handler = _file_handler(log_file, formatter, log_level)
        if file_handler is not None:
            root_logger.addHandler(file_handler)
            logging.info(f"Logging to file: {log_file}")

    _quiet(NOISY_LOGGERS, logging.NOTSET if log_level <= logging.DEBUG else logging.WARNING)
    logging.info(f"Logging configured. Level={logging.getLevelName(log_level)}")
