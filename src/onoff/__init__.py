################################################################################
# File Name: __init__.py
# Purpose/Description: On/off controller package initialization
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
On/off controller package for Audiophonics power boards.

This package provides:
- Pin translation for prefixed sysfs GPIO numbering (translatePin)
- GPIO chip prefix discovery (GpioPrefixProbe)
- GPIO line backends for sysfs and gpiozero (createLineFactory)
- The GPIO lifecycle manager (GpioLifecycleManager)
- Host lifecycle hooks and settings page (OnOffPlugin)

Usage:
    from onoff import OnOffPlugin

    plugin = OnOffPlugin('config.json')
    plugin.onAppStart()
    plugin.onStart()
"""

from .config_store import ConfigStore
from .gpio_lines import (
    GpioBindError,
    GpioLineError,
    GpioNotAvailableError,
    GpiozeroLineFactory,
    LineMode,
    SysfsLineFactory,
    createLineFactory,
)
from .gpio_prefix import GpioPrefixProbe, GpioPrefixProbeError
from .lifecycle_manager import (
    GpioLifecycleError,
    GpioLifecycleManager,
    ManagerState,
    PinConfig,
)
from .pin_translator import getKernelMajorVersion, translatePin, tryParsePin
from .plugin import OnOffPlugin
from .shutdown_action import SystemShutdownAction

__version__ = '1.0.0'

__all__ = [
    # Configuration
    'ConfigStore',
    # Pin translation
    'translatePin',
    'tryParsePin',
    'getKernelMajorVersion',
    # Prefix discovery
    'GpioPrefixProbe',
    'GpioPrefixProbeError',
    # GPIO lines
    'LineMode',
    'SysfsLineFactory',
    'GpiozeroLineFactory',
    'createLineFactory',
    'GpioLineError',
    'GpioBindError',
    'GpioNotAvailableError',
    # Lifecycle
    'GpioLifecycleManager',
    'GpioLifecycleError',
    'ManagerState',
    'PinConfig',
    # Host surface
    'OnOffPlugin',
    'SystemShutdownAction',
]
