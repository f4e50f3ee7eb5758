################################################################################
# File Name: error_handler.py
# Purpose/Description: Error classification and reporting for the on/off controller
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
Error handling module.

Provides centralized error handling with:
- Custom exception classes by error type
- Error classification (config, hardware, system)
- Structured error reporting
- Error collection for best-effort batch operations

The controller never retries: GPIO work is fire-once, so errors are
classified, logged and either re-raised or collected.

Usage:
    from common.error_handler import HardwareError, handleError

    try:
        result = operation()
    except Exception as e:
        handleError(e, reraise=False)
"""

import logging
import traceback
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of errors for classification."""
    CONFIGURATION = 'config'      # Config errors, fail fast
    HARDWARE = 'hardware'         # GPIO/OS resource errors, log and continue
    SYSTEM = 'system'             # Unexpected errors


# ================================================================================
# Custom Exception Classes
# ================================================================================

class BaseError(Exception):
    """Base exception for all custom errors."""

    category: ErrorCategory = ErrorCategory.SYSTEM

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def toDict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            'type': self.__class__.__name__,
            'category': self.category.value,
            'message': self.message,
            'details': self.details
        }


class ConfigurationError(BaseError):
    """Configuration validation failure."""
    category = ErrorCategory.CONFIGURATION


class HardwareError(BaseError):
    """GPIO line or OS probe failure."""
    category = ErrorCategory.HARDWARE


# ================================================================================
# Error Classification
# ================================================================================

def classifyError(error: Exception) -> ErrorCategory:
    """
    Classify an error into a category.

    Args:
        error: Exception to classify

    Returns:
        ErrorCategory for the error
    """
    if isinstance(error, BaseError):
        return error.category

    errorMessage = str(error).lower()

    # sysfs writes surface as OSError subclasses
    if isinstance(error, OSError):
        return ErrorCategory.HARDWARE

    if any(term in errorMessage for term in ['gpio', 'export', 'pin']):
        return ErrorCategory.HARDWARE

    if any(term in errorMessage for term in ['config', 'missing', 'required']):
        return ErrorCategory.CONFIGURATION

    return ErrorCategory.SYSTEM


# ================================================================================
# Error Handling
# ================================================================================

def handleError(
    error: Exception,
    context: dict[str, Any] | None = None,
    reraise: bool = True
) -> dict[str, Any]:
    """
    Handle an error with logging and classification.

    Args:
        error: Exception that occurred
        context: Additional context information
        reraise: Whether to re-raise the exception

    Returns:
        Error details dictionary

    Raises:
        The original exception if reraise is True
    """
    category = classifyError(error)
    context = context or {}

    errorDetails = {
        'type': type(error).__name__,
        'category': category.value,
        'message': str(error),
        'context': context,
        'traceback': traceback.format_exc()
    }

    if category == ErrorCategory.CONFIGURATION:
        logger.error(f"Configuration error: {error}")
    elif category == ErrorCategory.HARDWARE:
        logger.error(f"Hardware error: {error}")
    else:
        logger.error(f"Error: {error}", exc_info=True)

    if reraise:
        raise error

    return errorDetails


def formatError(error: Exception) -> str:
    """
    Format an error for display/logging.

    Args:
        error: Exception to format

    Returns:
        Formatted error string
    """
    category = classifyError(error)

    if isinstance(error, BaseError):
        details = f" | details={error.details}" if error.details else ""
        return f"[{category.value.upper()}] {error.message}{details}"

    return f"[{category.value.upper()}] {type(error).__name__}: {error}"


class ErrorCollector:
    """
    Collects multiple errors during a best-effort operation.

    Used when every step must be attempted and failures reported at the end,
    such as binding or releasing each GPIO role independently.

    Example:
        collector = ErrorCollector()
        for role in roles:
            try:
                release(role)
            except Exception as e:
                collector.add(e, role=role)

        if collector.hasErrors():
            collector.report()
    """

    def __init__(self):
        self.errors: list[dict[str, Any]] = []

    def add(self, error: Exception, **context: Any) -> None:
        """Add an error to the collection."""
        self.errors.append({
            'error': error,
            'category': classifyError(error).value,
            'message': str(error),
            'context': context
        })

    def hasErrors(self) -> bool:
        """Check if any errors were collected."""
        return len(self.errors) > 0

    def report(self) -> None:
        """Log all collected errors."""
        if not self.errors:
            return

        logger.error(f"Collected {len(self.errors)} errors:")
        for i, err in enumerate(self.errors, 1):
            contextStr = ' '.join(f'{k}={v}' for k, v in err['context'].items())
            suffix = f" | {contextStr}" if contextStr else ""
            logger.error(f"  {i}. [{err['category']}] {err['message']}{suffix}")
