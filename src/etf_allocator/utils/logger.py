"""
Logging Framework Module
========================
Centralized logging configuration for the ETF allocator.

Features:
- Console output with colored formatting
- Optional file logging (enabled via ETF_ALLOCATOR_LOG_DIR)
- Configurable console level via ETF_ALLOCATOR_LOG_LEVEL
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


# ================================================================================
# LOG LEVELS AND CONFIGURATION
# ================================================================================

LOG_DIR_ENV = "ETF_ALLOCATOR_LOG_DIR"
LOG_LEVEL_ENV = "ETF_ALLOCATOR_LOG_LEVEL"

DEFAULT_CONFIG = {
    'console_level': logging.WARNING,
    'file_level': logging.DEBUG,
    'format': '%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s',
    'date_format': '%Y-%m-%d %H:%M:%S',
}

ROOT_LOGGER_NAME = "etf_allocator"


# ================================================================================
# CUSTOM FORMATTER WITH COLORS
# ================================================================================

class ColoredFormatter(logging.Formatter):
    """Formatter with ANSI color codes for console output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        # The record is shared with the file handler: color a copy only
        colored = logging.makeLogRecord(record.__dict__)
        levelname = colored.levelname
        if levelname in self.COLORS:
            colored.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        return super().format(colored)


# ================================================================================
# LOGGER SETUP
# ================================================================================

def _level_from_env(default: int) -> int:
    raw = os.environ.get(LOG_LEVEL_ENV)
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    console_level: Optional[int] = None,
    file_level: int = DEFAULT_CONFIG['file_level'],
    log_dir: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the package root logger with console and optional file handlers.

    Child loggers (``etf_allocator.*``) propagate here, so handlers are
    attached once.

    Args:
        name: Logger name to configure
        console_level: Minimum level for console output (env override allowed)
        file_level: Minimum level for file output
        log_dir: Directory for log files; None reads ETF_ALLOCATOR_LOG_DIR,
            and file logging stays off when neither is set

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)  # Capture all, filter in handlers

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(
        console_level if console_level is not None
        else _level_from_env(DEFAULT_CONFIG['console_level'])
    )
    console_handler.setFormatter(ColoredFormatter(
        fmt=DEFAULT_CONFIG['format'],
        datefmt=DEFAULT_CONFIG['date_format']
    ))
    logger.addHandler(console_handler)

    log_dir = log_dir or os.environ.get(LOG_DIR_ENV)
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d')
        log_file = log_path / f"{name.replace('.', '_')}_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(
            fmt=DEFAULT_CONFIG['format'],
            datefmt=DEFAULT_CONFIG['date_format']
        ))
        logger.addHandler(file_handler)

    return logger


def set_console_level(level: int) -> None:
    """Change the console threshold of the package logger (CLI --verbose)."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)


# ================================================================================
# MODULE-SPECIFIC LOGGERS
# ================================================================================

def get_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    This is the recommended way to get loggers throughout the codebase.

    Args:
        module_name: Name of the module (use __name__)

    Returns:
        Logger instance, child of the configured package logger

    Usage:
        from etf_allocator.utils.logger import get_logger
        logger = get_logger(__name__)
        logger.info("Catalogue loaded")
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        setup_logger(ROOT_LOGGER_NAME)
    return logging.getLogger(module_name)
