# This module contains a custom formatter for logging messages with different log levels.
import logging
from typing import Optional


class CustomFormatter(logging.Formatter):
    """
    A custom formatter for logging messages with different log levels.

    Attributes:
        grey (str): ANSI escape sequence for grey color.
        yellow (str): ANSI escape sequence for yellow color.
        red (str): ANSI escape sequence for red color.
        bold_red (str): ANSI escape sequence for bold red color.
        reset (str): ANSI escape sequence to reset color.
        format (str): The log message format.
        FORMATS (dict): A dictionary mapping log levels to their respective log message formats.

    Methods:
        format(record): Formats the log record based on its log level.
    """
    grey = "\x1b[37;20m"
    yellow = "\x1b[33;20m"
    red = "\x1b[31;20m"
    bold_red = "\x1b[31;1m"
    dark_grey = "\x1b[30;1m"
    reset = "\x1b[0m"
    format = '[%(levelname)s] %(asctime)s - %(name)s - %(message)s'

    FORMATS = {
        logging.DEBUG: dark_grey + format + reset,
        logging.INFO: grey + format + reset,
        logging.WARNING: yellow + format + reset,
        logging.ERROR: red + format + reset,
        logging.CRITICAL: bold_red + format + reset
    }

    def format(self, record):
        """
        Formats the log record based on its log level.

        Args:
            record (logging.LogRecord): The log record to be formatted.

        Returns:
            str: The formatted log message.
        """
        log_fmt = self.FORMATS.get(record.levelno)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


ROOT_LOGGER_NAME = "content_strategist"
PLAIN_FORMAT = '[%(levelname)s] %(asctime)s - %(name)s - %(message)s'

_root = logging.getLogger(ROOT_LOGGER_NAME)
_console_handler: Optional[logging.Handler] = None


def _ensure_console_handler() -> None:
    """Attach the colored console handler to the application root logger once."""
    global _console_handler
    if _console_handler is not None:
        return

    _console_handler = logging.StreamHandler()
    _console_handler.setLevel(logging.DEBUG)
    _console_handler.setFormatter(CustomFormatter())
    _root.addHandler(_console_handler)
    _root.setLevel(logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger that propagates to the application root logger.

    Args:
        name: Usually the calling module's __name__.

    Returns:
        logging.Logger: The named child logger.
    """
    _ensure_console_handler()
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_file_logging(log_file: Optional[str], level: int = logging.INFO) -> None:
    """
    Configure the application log level and add a plain-text file handler.

    Args:
        log_file: Path of the log file, or None to log to the console only.
        level: Logging level for the application loggers.
    """
    _ensure_console_handler()
    _root.setLevel(level)
    _console_handler.setLevel(level)

    if not log_file:
        return

    for handler in _root.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename.endswith(log_file):
            return

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    _root.addHandler(file_handler)
