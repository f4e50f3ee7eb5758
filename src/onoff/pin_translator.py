################################################################################
# File Name: pin_translator.py
# Purpose/Description: Logical to physical GPIO pin number translation
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
Logical to physical GPIO pin number translation.

Kernels from 6.0 onward number the sysfs GPIO lines of the SoC chip from a
base offset (the chip prefix, e.g. 512 on a Raspberry Pi) instead of from 0.
Users configure the BCM number printed on the board; this module turns it
into the line number the sysfs interface expects.

Usage:
    from onoff.pin_translator import tryParsePin, translatePin

    if tryParsePin(config.get('boot_ok')) != 0:
        physical = translatePin(config.get('boot_ok'), prefix=512, kernelMajor=6)
        # physical == '534' for boot_ok == '22'
"""

import logging
from typing import Any

from .platform_utils import getKernelRelease

logger = logging.getLogger(__name__)

# Kernel major version from which sysfs GPIO numbers carry the chip prefix
PREFIXED_KERNEL_MAJOR = 6

# Pin value meaning "do not bind this line"
UNSET_PIN = 0


def tryParsePin(value: Any, default: int = UNSET_PIN) -> int:
    """
    Parse a configured pin value, falling back to a default.

    Only plain ASCII decimal digits (optionally signed "+") are accepted.
    None, empty strings, non-numeric strings and negative numbers all
    resolve to ``default``. Never raises.

    Args:
        value: Configured value (string, int or None)
        default: Value to return when parsing fails

    Returns:
        The parsed base-10 pin number or ``default``
    """
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, int):
        return value if value >= 0 else default

    text = str(value).strip()
    digits = text[1:] if text.startswith('+') else text
    if not (digits.isascii() and digits.isdigit()):
        return default

    return int(digits, 10)


def getKernelMajorVersion(release: str | None = None) -> int:
    """
    Extract the major version from a kernel release string.

    Args:
        release: Release string (defaults to the running kernel)

    Returns:
        Major version number, or 0 if it cannot be determined
    """
    if release is None:
        release = getKernelRelease()

    head = (release or '').split('.')[0]
    try:
        return int(head)
    except ValueError:
        logger.warning(f"Could not determine kernel major version from {release!r}")
        return 0


def translatePin(
    value: Any,
    prefix: int,
    kernelMajor: int | None = None,
    default: int = UNSET_PIN
) -> str:
    """
    Translate a logical pin into the physical sysfs line number.

    Malformed input silently degrades to ``default`` and is translated as
    if that were the logical pin; callers check for UNSET_PIN first.

    Args:
        value: Configured logical pin
        prefix: GPIO chip prefix discovered for this kernel
        kernelMajor: Kernel major version (defaults to the running kernel)
        default: Logical pin to use when ``value`` is unparsable

    Returns:
        The physical pin number as a string
    """
    pin = tryParsePin(value, default)

    if kernelMajor is None:
        kernelMajor = getKernelMajorVersion()

    if kernelMajor >= PREFIXED_KERNEL_MAJOR:
        return str(pin + prefix)
    return str(pin)
