################################################################################
# File Name: __init__.py
# Purpose/Description: Common utilities package initialization
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
Common utilities package.

This package provides shared functionality used across the application:
- Configuration validation and defaults
- Logging configuration
- Error handling

Usage:
    from common.config_validator import ConfigValidator
    from common.logging_config import getLogger
    from common.error_handler import HardwareError
"""

from .config_validator import ConfigValidationError, ConfigValidator
from .error_handler import (
    ConfigurationError,
    ErrorCollector,
    HardwareError,
    handleError,
)
from .logging_config import getLogger, setupLogging

__all__ = [
    'ConfigValidator',
    'ConfigValidationError',
    'getLogger',
    'setupLogging',
    'ConfigurationError',
    'ErrorCollector',
    'HardwareError',
    'handleError'
]
