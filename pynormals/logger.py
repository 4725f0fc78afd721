"""
A small logger wrapper shared by every module of the pynormals package.
"""
import os
import sys
import time
from typing import Optional, Union
from enum import Enum, auto


class LogLevel(Enum):
    """Log levels for controlling verbosity."""
    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()
    CRITICAL = auto()


_MODES = ('console', 'file', 'both')


class NormalsLogger:
    """
    A configurable logger that writes to the console, a file, or both, each with its own level.
    """
    def __init__(
        self,
        mode: str = 'console',
        log_file: Optional[str] = None,
        console_level: LogLevel = LogLevel.INFO,
        file_level: LogLevel = LogLevel.DEBUG,
        include_timestamp: bool = True
    ):
        """
        Initialize the logger.

        Args:
            mode: 'console', 'file', or 'both'
            log_file: Path to log file (required if mode is 'file' or 'both')
            console_level: Minimum log level for console output
            file_level: Minimum log level for file output
            include_timestamp: Whether to prefix messages with a timestamp
        """
        if mode not in _MODES:
            raise ValueError("mode must be 'console', 'file', or 'both'")
        if mode in ('file', 'both') and not log_file:
            raise ValueError("log_file must be provided when mode is 'file' or 'both'")

        self.mode = mode
        self.log_file = log_file
        self.console_level = console_level
        self.file_level = file_level
        self.include_timestamp = include_timestamp

        if self.log_file and mode != 'console':
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            # Start every run with an empty file
            with open(log_file, 'w'):
                pass

    def _writes_console(self, level: LogLevel) -> bool:
        return self.mode in ('console', 'both') and level.value >= self.console_level.value

    def _writes_file(self, level: LogLevel) -> bool:
        return self.mode in ('file', 'both') and level.value >= self.file_level.value

    def isEnabledFor(self, level: LogLevel) -> bool:
        """
        Check whether a message of the given level would be written anywhere.
        Mirrors ``logging.Logger.isEnabledFor`` so callers can skip building
        expensive debug messages.
        """
        return self._writes_console(level) or self._writes_file(level)

    def _format_message(self, message: str, level: LogLevel) -> str:
        timestamp = f"[{time.strftime('%Y-%m-%d %H:%M:%S')}] " if self.include_timestamp else ""
        return f"{timestamp}[{level.name}] {message}"

    def log(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        """
        Log a message with the specified level.

        Args:
            message: The message to log
            level: The log level (default: INFO)
        """
        if not self.isEnabledFor(level):
            return
        formatted = self._format_message(message, level)
        if self._writes_console(level):
            stream = sys.stderr if level.value >= LogLevel.WARNING.value else sys.stdout
            print(formatted, file=stream)
        if self._writes_file(level):
            with open(self.log_file, 'a') as f:
                f.write(formatted + '\n')

    def debug(self, message: str) -> None:
        self.log(message, LogLevel.DEBUG)

    def info(self, message: str) -> None:
        self.log(message, LogLevel.INFO)

    def warning(self, message: str) -> None:
        self.log(message, LogLevel.WARNING)

    def error(self, message: str) -> None:
        self.log(message, LogLevel.ERROR)

    def critical(self, message: str) -> None:
        self.log(message, LogLevel.CRITICAL)

    def __call__(self, message: str, level: Union[str, LogLevel] = LogLevel.INFO) -> None:
        """
        Allow the logger instance to be called directly, e.g. ``logger("done", "debug")``.
        """
        if isinstance(level, str):
            level = getattr(LogLevel, level.upper(), LogLevel.INFO)
        self.log(message, level)


# Default logger instance
DEFAULT_LOGGER = NormalsLogger(mode='console')


def get_logger(name: Optional[str] = None) -> NormalsLogger:
    """
    Return the package logger. ``name`` is accepted for parity with
    ``logging.getLogger`` and ignored.
    """
    return DEFAULT_LOGGER


def set_logger(logger: Optional[NormalsLogger]) -> None:
    """
    Replace the package logger.

    Args:
        logger: A NormalsLogger instance, or None to restore the console default
    """
    global DEFAULT_LOGGER
    if logger is None:
        DEFAULT_LOGGER = NormalsLogger(mode='console')
    elif not isinstance(logger, NormalsLogger):
        raise ValueError("Logger must be an instance of NormalsLogger")
    else:
        DEFAULT_LOGGER = logger
