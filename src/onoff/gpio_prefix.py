################################################################################
# File Name: gpio_prefix.py
# Purpose/Description: Best-effort discovery of the sysfs GPIO chip prefix
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
Best-effort discovery of the sysfs GPIO chip prefix.

Lists /sys/class/gpio/ with a shell command, strips every non-digit
character from each entry and keeps the first non-empty result
(``gpiochip512`` -> 512). The command runs synchronously as a fixed
unprivileged user/group when the process itself runs as root.

Failures are logged and reported as None; the probe never raises and
never retries.

Usage:
    from onoff.gpio_prefix import GpioPrefixProbe

    probe = GpioPrefixProbe()
    prefix = probe.probe()  # 512, or None on failure
"""

import logging
import os
import re
import subprocess

from common.error_handler import HardwareError

logger = logging.getLogger(__name__)


# ================================================================================
# Prefix Probe Exceptions
# ================================================================================


class GpioPrefixProbeError(HardwareError):
    """Raised internally when the prefix probe command fails."""
    pass


# ================================================================================
# Prefix Probe Constants
# ================================================================================

DEFAULT_PROBE_COMMAND = 'ls /sys/class/gpio/'

# Unprivileged account the probe runs as (first regular user on Raspberry Pi OS)
DEFAULT_PROBE_USER = 1000
DEFAULT_PROBE_GROUP = 1000

_NON_DIGITS = re.compile(r'[^0-9]')


def parsePrefixOutput(output: str) -> int | None:
    """
    Extract the prefix from a directory listing.

    Args:
        output: Probe command output, one entry per line

    Returns:
        First entry with digits, as an int, or None if there is none
    """
    for line in output.splitlines():
        digits = _NON_DIGITS.sub('', line)
        if digits:
            return int(digits)
    return None


# ================================================================================
# Prefix Probe Class
# ================================================================================


class GpioPrefixProbe:
    """
    One-shot probe of the GPIO chip prefix.

    Attributes:
        command: Shell command whose output lists the GPIO class entries
        user: uid to run the command as (applied only when running as root)
        group: gid to run the command as (applied only when running as root)
        timeout: Optional timeout in seconds; None waits for completion
    """

    def __init__(
        self,
        command: str = DEFAULT_PROBE_COMMAND,
        user: int | None = DEFAULT_PROBE_USER,
        group: int | None = DEFAULT_PROBE_GROUP,
        timeout: float | None = None
    ):
        self.command = command
        self.user = user
        self.group = group
        self.timeout = timeout

    def probe(self) -> int | None:
        """
        Run the probe.

        Returns:
            The discovered prefix, or None if the probe failed
        """
        try:
            output = self._run()
        except GpioPrefixProbeError as e:
            logger.error(f"Error getting GPIO prefix: {e}")
            return None

        prefix = parsePrefixOutput(output)
        if prefix is None:
            logger.error("Error getting GPIO prefix: probe returned no numeric entry")
            return None

        logger.debug(f"GPIO prefix discovered: {prefix}")
        return prefix

    def _privilegeArgs(self) -> dict:
        """Build the user/group drop for subprocess.run when running as root."""
        if not hasattr(os, 'geteuid') or os.geteuid() != 0:
            return {}

        args = {}
        if self.user is not None:
            args['user'] = self.user
        if self.group is not None:
            args['group'] = self.group
        return args

    def _run(self) -> str:
        try:
            result = subprocess.run(
                self.command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                **self._privilegeArgs()
            )
        except subprocess.TimeoutExpired as e:
            raise GpioPrefixProbeError(
                f"Probe timed out after {self.timeout}s",
                details={'command': self.command}
            ) from e
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            raise GpioPrefixProbeError(
                f"Probe could not run: {e}",
                details={'command': self.command}
            ) from e

        if result.returncode != 0:
            raise GpioPrefixProbeError(
                f"Probe exited with {result.returncode}: {result.stderr.strip()}",
                details={'command': self.command, 'returncode': result.returncode}
            )

        return result.stdout
