################################################################################
# File Name: shutdown_action.py
# Purpose/Description: System power-off action triggered by the shutdown button
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
System power-off action triggered by the shutdown button.

Usage:
    from onoff.shutdown_action import SystemShutdownAction

    action = SystemShutdownAction()
    action()  # runs 'systemctl poweroff'

Note:
    System shutdown requires appropriate permissions (typically root).
    On Raspberry Pi, the service user should have sudo NOPASSWD for systemctl.
"""

import logging
import subprocess
import time
from collections.abc import Sequence

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_COMMAND = ('systemctl', 'poweroff')
DEFAULT_SHUTDOWN_TIMEOUT = 30  # seconds


class SystemShutdownAction:
    """
    Zero-argument callable that powers the system off.

    Failures are logged, never raised, so the caller's edge watcher keeps
    running.

    Attributes:
        command: Command line to execute
        timeout: Seconds to wait for the command
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_SHUTDOWN_COMMAND,
        timeout: float = DEFAULT_SHUTDOWN_TIMEOUT
    ):
        if not command:
            raise ValueError("Shutdown command must not be empty")
        if timeout <= 0:
            raise ValueError("Shutdown timeout must be positive")

        self.command = list(command)
        self.timeout = timeout

    def __call__(self) -> bool:
        """
        Execute the shutdown command.

        Returns:
            True if the command exited with status 0
        """
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        logger.info(f"Initiating system shutdown at {timestamp}")

        try:
            result = subprocess.run(
                self.command,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.error("Shutdown command timed out")
            return False
        except OSError as e:
            logger.error(f"Failed to execute shutdown: {e}")
            return False

        if result.returncode != 0:
            logger.warning(
                f"Shutdown command returned non-zero: {result.returncode}. "
                f"stderr: {result.stderr}"
            )
            return False

        return True
