################################################################################
# File Name: config_validator.py
# Purpose/Description: Configuration validation with defaults and type checks
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
Configuration validation module.

Provides validation of the controller configuration with:
- Default value application for controller options
- Type checks for controller options
- Pin value sanity checks (warn only, never fatal)

Pin assignments are never defaulted here: an absent pin means the line is
left unbound.

Usage:
    from common.config_validator import ConfigValidator

    validator = ConfigValidator()
    config = validator.validate(store.toDict())
"""

import copy
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, invalidFields: Optional[List[str]] = None):
        super().__init__(message)
        self.invalidFields = invalidFields or []


# Keys holding logical GPIO pin numbers
PIN_KEYS: List[str] = ['soft_shutdown', 'shutdown_button', 'boot_ok']

# Default values for optional controller settings
DEFAULTS: Dict[str, Any] = {
    'logging.level': 'INFO',
    'logging.file': None,
    'gpio.backend': 'auto',
    'gpio.probeCommand': 'ls /sys/class/gpio/',
    'gpio.probeUser': 1000,
    'gpio.probeGroup': 1000,
    'gpio.probeTimeout': None,
    'shutdown.pulseSeconds': 1.0,
    'shutdown.command': ['systemctl', 'poweroff'],
    'shutdown.timeout': 30,
    'ui.language': 'en',
}

# Expected types of controller settings, checked after defaults are applied
FIELD_TYPES: Dict[str, Any] = {
    'logging.level': str,
    'gpio.backend': str,
    'gpio.probeCommand': str,
    'gpio.probeUser': int,
    'gpio.probeGroup': int,
    'shutdown.pulseSeconds': (int, float),
    'shutdown.command': list,
    'shutdown.timeout': (int, float),
    'ui.language': str,
}


class ConfigValidator:
    """
    Validates configuration dictionaries.

    Provides methods to:
    - Apply default values
    - Validate field types
    - Flag pin values that will be treated as unset

    Attributes:
        defaults: Dictionary of default values for optional fields
        fieldTypes: Expected type per dotted key
    """

    def __init__(
        self,
        defaults: Optional[Dict[str, Any]] = None,
        fieldTypes: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the validator.

        Args:
            defaults: Dictionary of default values in dot notation
            fieldTypes: Expected types in dot notation (e.g., 'gpio.backend': str)
        """
        self.defaults = defaults if defaults is not None else DEFAULTS
        self.fieldTypes = fieldTypes if fieldTypes is not None else FIELD_TYPES

    def validate(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and enhance configuration.

        Performs:
        1. Default value application
        2. Field type checks
        3. Pin value checks (warnings only)

        Args:
            config: Raw configuration dictionary

        Returns:
            Validated configuration with defaults applied

        Raises:
            ConfigValidationError: If a field has the wrong type
        """
        config = self._applyDefaults(config)

        invalidFields = [
            key for key, expectedType in self.fieldTypes.items()
            if not self.validateField(config, key, expectedType, allowNone=True)
        ]
        if invalidFields:
            fieldList = ', '.join(invalidFields)
            raise ConfigValidationError(
                f"Invalid type for configuration fields: {fieldList}",
                invalidFields=invalidFields
            )

        self._checkPins(config)

        logger.info("Configuration validated successfully")
        return config

    def _applyDefaults(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply default values for missing optional fields.

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with defaults applied
        """
        for key, defaultValue in self.defaults.items():
            if self._getNestedValue(config, key) is None:
                self._setNestedValue(config, key, copy.deepcopy(defaultValue))
                logger.debug(f"Applied default for {key}: {defaultValue}")

        return config

    def _checkPins(self, config: Dict[str, Any]) -> None:
        """Warn about pin values that will resolve to 'unset' at bind time."""
        for key in PIN_KEYS:
            value = config.get(key)
            if value is None or value == '':
                continue
            text = str(value).strip().removeprefix('+')
            if not (text.isascii() and text.isdigit()):
                logger.warning(
                    f"Pin '{key}' has non-numeric or negative value {value!r}; "
                    "line will not be bound"
                )

    def _getNestedValue(self, config: Dict[str, Any], key: str) -> Any:
        """
        Get a value from nested dictionary using dot notation.

        Args:
            config: Configuration dictionary
            key: Dot-notation key (e.g., 'gpio.backend')

        Returns:
            Value if found, None otherwise
        """
        keys = key.split('.')
        value = config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return None

        return value

    def _setNestedValue(self, config: Dict[str, Any], key: str, value: Any) -> None:
        """
        Set a value in nested dictionary using dot notation.

        Args:
            config: Configuration dictionary to modify
            key: Dot-notation key (e.g., 'gpio.backend')
            value: Value to set
        """
        keys = key.split('.')
        current = config

        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

    def validateField(
        self,
        config: Dict[str, Any],
        key: str,
        expectedType: type,
        allowNone: bool = False
    ) -> bool:
        """
        Validate a specific field's type.

        Args:
            config: Configuration dictionary
            key: Dot-notation key to validate
            expectedType: Expected Python type
            allowNone: Whether None is acceptable

        Returns:
            True if valid, False otherwise
        """
        value = self._getNestedValue(config, key)

        if value is None:
            return allowNone

        return isinstance(value, expectedType)
