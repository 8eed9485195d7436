"""
Logging module for the Nura command console.
Simple, clean logging with rich formatting.
"""
import os
import re
from datetime import datetime
from typing import Optional, List

from rich.console import Console

console = Console()


# Patterns to filter out in quiet mode (pipeline internals)
QUIET_MODE_FILTERS: List[str] = [
    r"\[WAKE\]",                # Wake phrase detection internals
    r"\[LOCALE\]",              # Locale detection
    r"\[NUMERALS\]",            # Numeral extraction
    r"\[MATCH\]",               # Fuzzy match ranking
    r"\[EVENTS\]",              # Event bus delivery
    r"\[DISPATCH\]",            # Domain event dispatch
    r"\[SESSION\] state",       # Session state transitions
    r"Running in quiet mode",   # Quiet mode message
]

# Compiled patterns for efficient matching
_quiet_mode_patterns: Optional[List[re.Pattern]] = None


def _get_quiet_filters() -> List[re.Pattern]:
    """Get compiled regex patterns for quiet mode filtering"""
    global _quiet_mode_patterns
    if _quiet_mode_patterns is None:
        _quiet_mode_patterns = [re.compile(p, re.IGNORECASE) for p in QUIET_MODE_FILTERS]
    return _quiet_mode_patterns


def _should_filter_quiet(message: str) -> bool:
    """Check if message should be filtered in quiet mode"""
    for pattern in _get_quiet_filters():
        if pattern.search(message):
            return True
    return False


class LogLevel:
    """Log level constants"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Logger:
    """Simple logger with timestamps and rich formatting"""

    LEVEL_PRIORITY = {
        "DEBUG": 0,
        "INFO": 1,
        "WARNING": 2,
        "ERROR": 3,
        "CRITICAL": 4,
    }

    LEVEL_COLORS = {
        "DEBUG": "dim cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold red",
    }

    def __init__(self, level: str = "INFO", quiet_mode: bool = False):
        self.level = level.upper()
        self.quiet_mode = quiet_mode

    def _should_log(self, level: str) -> bool:
        """Check if message should be logged based on level"""
        return self.LEVEL_PRIORITY.get(level, 0) >= self.LEVEL_PRIORITY.get(self.level, 0)

    def _should_filter_message(self, message: str) -> bool:
        """Check if message should be filtered (quiet mode)"""
        if not self.quiet_mode:
            return False
        return _should_filter_quiet(message)

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp"""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        return f"[{timestamp}] [{level:8}] {message}"

    def log(self, level: str, message: str) -> None:
        """Log a message at the specified level"""
        if not self._should_log(level):
            return

        if self._should_filter_message(message):
            return

        formatted = self._format_message(level, message)
        # markup=False keeps our own [TAG] prefixes from being read as rich markup
        console.print(formatted, style=self.LEVEL_COLORS.get(level, "white"), markup=False, highlight=False)

    def debug(self, message: str) -> None:
        self.log(LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self.log(LogLevel.INFO, message)

    def warning(self, message: str) -> None:
        self.log(LogLevel.WARNING, message)

    def error(self, message: str) -> None:
        self.log(LogLevel.ERROR, message)

    def critical(self, message: str) -> None:
        self.log(LogLevel.CRITICAL, message)


# Global logger instance
_global_logger: Optional[Logger] = None


def init_logger(level: str = "INFO", quiet_mode: bool = False) -> Logger:
    """
    Initialize global logger

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        quiet_mode: If True, filter out pipeline internals like match rankings
    """
    global _global_logger
    _global_logger = Logger(level, quiet_mode=quiet_mode)
    return _global_logger


def get_logger() -> Logger:
    """Get global logger instance"""
    global _global_logger
    if _global_logger is None:
        quiet = os.environ.get("NURA_QUIET_MODE", "false").lower() in ("true", "1", "yes")
        level = os.environ.get("NURA_LOG_LEVEL", "INFO")
        _global_logger = Logger(level, quiet_mode=quiet)
    return _global_logger


def set_quiet_mode(enabled: bool) -> None:
    """Enable or disable quiet mode on the global logger"""
    if _global_logger:
        _global_logger.quiet_mode = enabled
