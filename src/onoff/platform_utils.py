################################################################################
# File Name: platform_utils.py
# Purpose/Description: Platform detection utilities for Raspberry Pi hardware
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
Platform detection utilities for Raspberry Pi hardware.

This module provides functions to detect whether the code is running on
a Raspberry Pi, whether the legacy sysfs GPIO interface is present, and
which kernel release is running. It handles graceful fallback on non-Pi
systems.

Usage:
    from onoff.platform_utils import isRaspberryPi, getKernelRelease

    if isRaspberryPi():
        print(f"Kernel {getKernelRelease()}")
"""

import logging
import os
import platform

logger = logging.getLogger(__name__)

# Path to the device tree model file on Linux systems
DEVICE_TREE_MODEL_PATH = '/proc/device-tree/model'

# Root of the legacy sysfs GPIO interface
SYSFS_GPIO_ROOT = '/sys/class/gpio'


def isRaspberryPi() -> bool:
    """
    Detect whether the code is running on a Raspberry Pi.

    Checks for Raspberry Pi hardware by reading the device tree model file
    on Linux systems. Returns False gracefully on non-Pi systems.

    Returns:
        True if running on Raspberry Pi, False otherwise.
    """
    try:
        if platform.system() != 'Linux':
            return False

        if not os.path.exists(DEVICE_TREE_MODEL_PATH):
            return False

        with open(DEVICE_TREE_MODEL_PATH) as f:
            modelString = f.read()

        # The model string contains null bytes, so strip them
        modelString = modelString.strip('\x00').strip()
        isPi = 'Raspberry Pi' in modelString

        if isPi:
            logger.debug(f"Detected Raspberry Pi: {modelString}")

        return isPi

    except OSError as e:
        logger.debug(f"Could not read device tree model: {e}")
        return False


def hasSysfsGpio(root: str = SYSFS_GPIO_ROOT) -> bool:
    """
    Check whether the sysfs GPIO export interface is available.

    Args:
        root: sysfs GPIO class directory

    Returns:
        True if ``<root>/export`` exists
    """
    return os.path.exists(os.path.join(root, 'export'))


def getKernelRelease() -> str:
    """
    Get the running kernel release string.

    Returns:
        Release string such as '6.1.0-rpi7-rpi-v8', or '' if unknown
    """
    return platform.release()
