"""
Centralized logging configuration for dvm.

User-facing output goes through the ``dvm_helper`` logger: informational
lines to stdout, warnings and errors to stderr so they never mix with
output that scripts capture (``dvm current``, ``dvm which``).
"""

import logging
import sys


LOGGER_NAME = "dvm_helper"


def setup_logging(
    debug: bool = False,
    silent: bool = False,
    propagate: bool = False,
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        debug: Enable debug output
        silent: Suppress everything below ERROR
        propagate: Allow log propagation (useful for testing)

    Returns:
        Configured logger instance
    """
    if debug:
        effective_level = logging.DEBUG
    elif silent:
        effective_level = logging.ERROR
    else:
        effective_level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(effective_level)

    # Clear existing handlers
    logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(effective_level)
    stdout_handler.addFilter(_BelowLevelFilter(logging.WARNING))
    stdout_handler.setFormatter(ColoredFormatter(use_colors=sys.stdout.isatty()))
    logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(max(effective_level, logging.WARNING))
    stderr_handler.setFormatter(ColoredFormatter(use_colors=sys.stderr.isatty()))
    logger.addHandler(stderr_handler)

    logger.propagate = propagate

    return logger


class _BelowLevelFilter(logging.Filter):
    """Pass only records strictly below a level."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


class ColoredFormatter(logging.Formatter):
    """
    Formatter with colored output for different log levels.

    INFO lines are printed bare; they are the normal command output.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[1;31m', # Bold Red
    }
    RESET = '\033[0m'

    PREFIXES = {
        'DEBUG': 'DEBUG: ',
        'ERROR': 'ERROR: ',
        'CRITICAL': 'ERROR: ',
    }

    def __init__(self, use_colors: bool = True):
        super().__init__("%(message)s")
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with level prefix and optional color."""
        message = self.PREFIXES.get(record.levelname, '') + super().format(record)
        color = self.COLORS.get(record.levelname, '')
        if self.use_colors and color:
            return f"{color}{message}{self.RESET}"
        return message
