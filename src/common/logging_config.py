################################################################################
# File Name: logging_config.py
# Purpose/Description: Structured logging configuration and utilities
# Author: Michael Cornelison
# Creation Date: 2026-10-19
# Copyright: (c) 2026 Michael Cornelison. All rights reserved.
#
# Modification History:
# ================================================================================
# Date          | Author       | Description
# ================================================================================
# 2026-10-19    | M. Cornelison | Initial implementation
# ================================================================================
################################################################################

"""
Logging configuration module.

Provides structured logging with:
- Configurable log levels
- Console and file output
- Consistent formatting with optional key=value context

Usage:
    from common.logging_config import setupLogging, getLogger

    setupLogging(level='INFO')
    logger = getLogger(__name__)
    logWithContext(logger, 'info', "Line bound", role='boot_ok', pin=22)
"""

import logging
import sys
from pathlib import Path
from typing import Any

# Default log format
DEFAULT_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s | %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter for structured logging.

    Appends the record's ``context`` dict (if any) as key=value pairs.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record with context fields.

        Args:
            record: Log record to format

        Returns:
            Formatted log string
        """
        message = super().format(record)

        context = getattr(record, 'context', None)
        if context and isinstance(context, dict):
            message += ' | ' + ' '.join(f'{k}={v}' for k, v in context.items())

        return message


def setupLogging(
    level: str = 'INFO',
    logFormat: str | None = None,
    logFile: str | None = None
) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        logFormat: Custom format string
        logFile: Optional file path for log output

    Returns:
        Root logger instance
    """
    rootLogger = logging.getLogger()
    rootLogger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Clear existing handlers
    rootLogger.handlers.clear()

    formatter = StructuredFormatter(
        fmt=logFormat or DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT
    )

    consoleHandler = logging.StreamHandler(sys.stdout)
    consoleHandler.setFormatter(formatter)
    rootLogger.addHandler(consoleHandler)

    if logFile:
        logPath = Path(logFile)
        logPath.parent.mkdir(parents=True, exist_ok=True)

        fileHandler = logging.FileHandler(logFile, encoding='utf-8')
        fileHandler.setFormatter(formatter)
        rootLogger.addHandler(fileHandler)

    rootLogger.info(f"Logging configured | level={level}")

    return rootLogger


def getLogger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def logWithContext(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: Any
) -> None:
    """
    Log a message with structured context.

    Args:
        logger: Logger instance
        level: Log level
        message: Log message
        **context: Additional context fields
    """
    logFunc = getattr(logger, level.lower(), logger.info)

    if context:
        logFunc(message, extra={'context': context})
    else:
        logFunc(message)
