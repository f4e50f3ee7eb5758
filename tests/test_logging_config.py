################################################################################
# File Name: test_logging_config.py
# Purpose/Description: Tests for logging configuration
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
Tests for the logging_config module.

Run with:
    pytest tests/test_logging_config.py -v
"""

import logging
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

srcPath = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(srcPath))

from common.logging_config import (
    DEFAULT_FORMAT,
    StructuredFormatter,
    getLogger,
    logWithContext,
    setupLogging,
)


@pytest.fixture(autouse=True)
def restoreRootLogger():
    """Restore root logger handlers and level after each test."""
    rootLogger = logging.getLogger()
    savedHandlers = list(rootLogger.handlers)
    savedLevel = rootLogger.level
    yield
    for handler in rootLogger.handlers:
        if handler not in savedHandlers:
            handler.close()
    rootLogger.handlers[:] = savedHandlers
    rootLogger.setLevel(savedLevel)


def makeRecord(message: str, context=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name='onoff.test', level=logging.INFO, pathname=__file__, lineno=1,
        msg=message, args=(), exc_info=None
    )
    if context is not None:
        record.context = context
    return record


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_format_basicMessage_formatsCorrectly(self):
        """
        Given: A record without context
        When: Formatted
        Then: Contains level and message with nothing appended
        """
        formatter = StructuredFormatter(fmt='%(levelname)s | %(message)s')

        assert formatter.format(makeRecord('GPIO line bound')) == 'INFO | GPIO line bound'

    def test_format_withContext_appendsFields(self):
        """
        Given: A record with a context dict
        When: Formatted
        Then: key=value pairs are appended
        """
        formatter = StructuredFormatter(fmt='%(message)s')

        result = formatter.format(makeRecord('GPIO line bound', {'role': 'boot_ok', 'pin': 22}))

        assert result == 'GPIO line bound | role=boot_ok pin=22'


class TestSetupLogging:
    """Tests for setupLogging."""

    @pytest.mark.parametrize('level, expected', [
        ('DEBUG', logging.DEBUG),
        ('info', logging.INFO),
        ('WARNING', logging.WARNING),
        ('bogus', logging.INFO),
    ])
    def test_setupLogging_level_setsRootLevel(self, level, expected):
        """
        Given: A level name
        When: setupLogging is called
        Then: The root logger uses that level (INFO if unknown)
        """
        assert setupLogging(level=level).level == expected

    def test_setupLogging_clearsExistingHandlers(self):
        """
        Given: A root logger with an extra handler
        When: setupLogging is called
        Then: Only the console handler remains
        """
        logging.getLogger().addHandler(logging.NullHandler())

        rootLogger = setupLogging()

        assert len(rootLogger.handlers) == 1
        assert isinstance(rootLogger.handlers[0].formatter, StructuredFormatter)
        assert rootLogger.handlers[0].formatter._fmt == DEFAULT_FORMAT

    def test_setupLogging_withLogFile_createsFileAndParents(self, tmp_path):
        """
        Given: A log file path in a missing directory
        When: setupLogging is called
        Then: A file handler is added and the file is written
        """
        logFile = tmp_path / 'logs' / 'onoff.log'

        rootLogger = setupLogging(logFile=str(logFile))

        assert len(rootLogger.handlers) == 2
        assert 'Logging configured' in logFile.read_text(encoding='utf-8')


class TestLoggerHelpers:
    """Tests for getLogger and logWithContext."""

    def test_getLogger_sameName_returnsSameLogger(self):
        """
        Given: A logger name
        When: getLogger is called twice
        Then: Returns the same logger
        """
        assert getLogger('onoff.test') is getLogger('onoff.test')

    def test_logWithContext_withContext_passesExtra(self):
        """
        Given: Context fields
        When: logWithContext is called
        Then: The level method receives them as extra context
        """
        logger = MagicMock()

        logWithContext(logger, 'warning', 'Release failed', role='boot_ok')

        logger.warning.assert_called_once_with(
            'Release failed', extra={'context': {'role': 'boot_ok'}}
        )

    def test_logWithContext_noContext_logsPlainMessage(self):
        """
        Given: No context fields
        When: logWithContext is called
        Then: The message is logged without extra
        """
        logger = MagicMock()

        logWithContext(logger, 'debug', 'Nothing to release')

        logger.debug.assert_called_once_with('Nothing to release')
