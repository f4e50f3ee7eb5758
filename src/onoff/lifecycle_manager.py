################################################################################
# File Name: lifecycle_manager.py
# Purpose/Description: Bind, watch and release the on/off controller GPIO lines
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
GPIO lifecycle manager for the on/off controller.

Owns the three optional lines of the power board:
- soft_shutdown: output telling the power board that power may be cut
- shutdown_button: input watched on both edges; any edge requests shutdown
- boot_ok: output driven high once the software is up

Lines are bound on start(), released on stop(), and the soft_shutdown line
is pulsed by notifyReboot()/notifyShutdown(). A pin value of 0 (or an
unparsable value) leaves that role unbound.

Usage:
    from onoff.lifecycle_manager import GpioLifecycleManager, PinConfig

    manager = GpioLifecycleManager(lineFactory, shutdownAction)
    manager.start(PinConfig(softShutdown='4', shutdownButton='17', bootOk='22'))
    ...
    manager.notifyShutdown().result()
    manager.stop()
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Any

from common.error_handler import ErrorCollector, HardwareError
from common.logging_config import logWithContext

from .gpio_lines import GpioLine, LineFactory, LineMode
from .gpio_prefix import GpioPrefixProbe
from .pin_translator import UNSET_PIN, getKernelMajorVersion, translatePin, tryParsePin

logger = logging.getLogger(__name__)


# ================================================================================
# Lifecycle Manager Exceptions
# ================================================================================


class GpioLifecycleError(HardwareError):
    """Raised on an invalid lifecycle transition."""
    pass


# ================================================================================
# Lifecycle Manager Constants and Types
# ================================================================================

# Hold time of the soft-shutdown pulse before it is released
DEFAULT_PULSE_SECONDS = 1.0

ROLE_SOFT_SHUTDOWN = 'soft_shutdown'
ROLE_SHUTDOWN_BUTTON = 'shutdown_button'
ROLE_BOOT_OK = 'boot_ok'

# Binding order; each role's fixed line mode
ROLE_MODES: dict[str, LineMode] = {
    ROLE_SOFT_SHUTDOWN: LineMode.OUTPUT,
    ROLE_SHUTDOWN_BUTTON: LineMode.INPUT_BOTH_EDGES,
    ROLE_BOOT_OK: LineMode.OUTPUT_HIGH,
}

# Release order
RELEASE_ORDER = (ROLE_BOOT_OK, ROLE_SOFT_SHUTDOWN, ROLE_SHUTDOWN_BUTTON)


class ManagerState(Enum):
    """Lifecycle states of the manager."""
    UNCONFIGURED = 'unconfigured'
    STARTING = 'starting'
    BOUND = 'bound'
    WATCHING = 'watching'
    STOPPING = 'stopping'
    RELEASED = 'released'


@dataclass(frozen=True)
class PinConfig:
    """
    Configured logical pins, as stored (strings, ints or None).

    A value of 0, None or anything non-numeric means "do not bind".
    """

    softShutdown: Any = None
    shutdownButton: Any = None
    bootOk: Any = None

    @classmethod
    def fromStore(cls, store: Any) -> 'PinConfig':
        """Build from any object with ``get(key)`` (e.g. ConfigStore)."""
        return cls(
            softShutdown=store.get(ROLE_SOFT_SHUTDOWN),
            shutdownButton=store.get(ROLE_SHUTDOWN_BUTTON),
            bootOk=store.get(ROLE_BOOT_OK),
        )

    def forRole(self, role: str) -> Any:
        return {
            ROLE_SOFT_SHUTDOWN: self.softShutdown,
            ROLE_SHUTDOWN_BUTTON: self.shutdownButton,
            ROLE_BOOT_OK: self.bootOk,
        }[role]


# ================================================================================
# Lifecycle Manager Class
# ================================================================================


class GpioLifecycleManager:
    """
    State machine owning the on/off controller's GPIO lines.

    States: UNCONFIGURED -> STARTING -> BOUND -> WATCHING -> STOPPING -> RELEASED.
    start() is accepted from UNCONFIGURED or RELEASED only.

    Attributes:
        state: Current ManagerState
        gpioPrefix: Chip prefix used for the most recent bind
        boundPins: Physical pin per bound role
    """

    def __init__(
        self,
        lineFactory: LineFactory,
        shutdownAction: Callable[[], None],
        prefixProbe: GpioPrefixProbe | None = None,
        kernelMajor: Callable[[], int] = getKernelMajorVersion,
        pulseSeconds: float = DEFAULT_PULSE_SECONDS
    ):
        """
        Initialize the manager.

        Args:
            lineFactory: Opens GPIO lines
            shutdownAction: Zero-argument call made on every button edge
            prefixProbe: Chip prefix probe (default: GpioPrefixProbe())
            kernelMajor: Returns the running kernel's major version
            pulseSeconds: Soft-shutdown hold time for notifyShutdown()

        Raises:
            ValueError: If pulseSeconds is negative
        """
        if pulseSeconds < 0:
            raise ValueError("Pulse time must be non-negative")

        self._lineFactory = lineFactory
        self._shutdownAction = shutdownAction
        self._prefixProbe = prefixProbe or GpioPrefixProbe()
        self._kernelMajor = kernelMajor
        self._pulseSeconds = pulseSeconds

        self._gpioPrefix = 0
        self._lines: dict[str, GpioLine] = {}
        self._boundPins: dict[str, int] = {}
        self._state = ManagerState.UNCONFIGURED
        self._lock = threading.Lock()

    # ----------------------------------------------------------------------------
    # Prefix and translation
    # ----------------------------------------------------------------------------

    def refreshGpioPrefix(self) -> int:
        """
        Re-probe the chip prefix, keeping the previous value on failure.

        Returns:
            The prefix now in effect
        """
        prefix = self._prefixProbe.probe()
        if prefix is not None:
            self._gpioPrefix = prefix
        return self._gpioPrefix

    def physicalPin(self, value: Any) -> int:
        """
        Translate a configured pin for the active line factory.

        Factories that address chip-relative numbers get the logical pin.
        """
        if not self._lineFactory.usesGlobalNumbering:
            return tryParsePin(value)
        return int(translatePin(value, self._gpioPrefix, self._kernelMajor()))

    # ----------------------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------------------

    def start(self, pinConfig: PinConfig) -> None:
        """
        Bind the configured lines and watch the shutdown button.

        Each role binds independently: a failed bind is logged and leaves
        that role unbound without affecting the others.

        Args:
            pinConfig: Logical pins to bind

        Raises:
            GpioLifecycleError: If already started
        """
        with self._lock:
            if self._state in (
                ManagerState.STARTING, ManagerState.BOUND, ManagerState.WATCHING
            ):
                raise GpioLifecycleError(
                    f"Cannot start GPIO lines while {self._state.value}"
                )
            self._state = ManagerState.STARTING

            self.refreshGpioPrefix()
            logger.info("Configuring GPIO pins")

            errors = ErrorCollector()
            for role, mode in ROLE_MODES.items():
                self._bindRole(role, mode, pinConfig.forRole(role), errors)

            self._state = ManagerState.BOUND

            button = self._lines.get(ROLE_SHUTDOWN_BUTTON)
            if button is not None:
                pin = self._boundPins[ROLE_SHUTDOWN_BUTTON]
                try:
                    button.watch(self._handleButtonEdge)
                except Exception as e:
                    errors.add(e, role=ROLE_SHUTDOWN_BUTTON, pin=pin)
                else:
                    self._state = ManagerState.WATCHING
                    logger.info(f"Watching shutdown button on GPIO {pin}")

            if errors.hasErrors():
                errors.report()

    def _bindRole(
        self,
        role: str,
        mode: LineMode,
        value: Any,
        errors: ErrorCollector
    ) -> None:
        if tryParsePin(value) == UNSET_PIN:
            logger.debug(f"{role} not configured - line left unbound")
            return

        pin = self.physicalPin(value)
        try:
            self._lines[role] = self._lineFactory.open(pin, mode)
        except Exception as e:
            errors.add(e, role=role, pin=pin)
            return

        self._boundPins[role] = pin
        logWithContext(logger, 'info', "GPIO line bound", role=role, pin=pin, mode=mode.value)

    def stop(self) -> None:
        """
        Release every bound line.

        Releases boot_ok, soft_shutdown, then shutdown_button (after removing
        its edge watches). Each release is attempted even if another fails.
        Safe to call multiple times or before start().
        """
        with self._lock:
            if self._state in (ManagerState.UNCONFIGURED, ManagerState.RELEASED):
                return

            self._state = ManagerState.STOPPING
            logger.info("Releasing GPIO pins")

            errors = ErrorCollector()
            for role in RELEASE_ORDER:
                line = self._lines.pop(role, None)
                pin = self._boundPins.pop(role, None)
                if line is None:
                    continue
                if role == ROLE_SHUTDOWN_BUTTON:
                    try:
                        line.unwatchAll()
                    except Exception as e:
                        errors.add(e, role=role, pin=pin)
                try:
                    line.unexport()
                    logger.debug(f"{role} GPIO {pin} released")
                except Exception as e:
                    errors.add(e, role=role, pin=pin)

            if errors.hasErrors():
                errors.report()

            self._state = ManagerState.RELEASED

    # ----------------------------------------------------------------------------
    # Shutdown sequencing
    # ----------------------------------------------------------------------------

    def _handleButtonEdge(self, value: int) -> None:
        """Request shutdown on any edge of the shutdown button."""
        logger.info(f"Hardware shutdown button edge (value={value}) - requesting shutdown")
        try:
            self._shutdownAction()
        except Exception as e:
            logger.error(f"Error in shutdown action: {e}")

    def notifyReboot(self) -> None:
        """
        Signal a reboot: drive soft_shutdown active and return.

        The reboot itself removes power from the line, so it is not reset.
        """
        line = self._lines.get(ROLE_SOFT_SHUTDOWN)
        if line is None:
            logger.debug("soft_shutdown not bound - reboot notification skipped")
            return

        line.write(1)
        logger.info("Soft shutdown line asserted for reboot")

    def notifyShutdown(self) -> Future:
        """
        Signal a shutdown: hold soft_shutdown active for the pulse time.

        Writes 1, then after the pulse time writes 0 on a timer thread and
        resolves the returned future. The sequence cannot be cancelled.

        Returns:
            Future resolved once the line has been released (or failed)
        """
        future: Future = Future()
        future.set_running_or_notify_cancel()

        line = self._lines.get(ROLE_SOFT_SHUTDOWN)
        if line is None:
            logger.debug("soft_shutdown not bound - shutdown notification skipped")
            future.set_result(None)
            return future

        try:
            line.write(1)
        except Exception as e:
            logger.error(f"Failed to assert soft shutdown line: {e}")
            future.set_exception(e)
            return future

        logger.info(f"Soft shutdown line asserted for {self._pulseSeconds}s")

        def release() -> None:
            try:
                line.write(0)
            except Exception as e:
                logger.error(f"Failed to release soft shutdown line: {e}")
                future.set_exception(e)
                return
            logger.info("Soft shutdown line released")
            future.set_result(None)

        timer = threading.Timer(self._pulseSeconds, release)
        timer.daemon = True
        timer.start()
        return future

    # ----------------------------------------------------------------------------
    # Properties
    # ----------------------------------------------------------------------------

    @property
    def state(self) -> ManagerState:
        """Get the current lifecycle state."""
        return self._state

    @property
    def gpioPrefix(self) -> int:
        """Get the chip prefix used for the most recent bind."""
        return self._gpioPrefix

    @property
    def boundPins(self) -> dict[str, int]:
        """Get a copy of the physical pin per bound role."""
        return dict(self._boundPins)

    def isBound(self, role: str) -> bool:
        """Check whether a role currently holds a line."""
        return role in self._lines

    def close(self) -> None:
        """Release all lines. Safe to call multiple times."""
        self.stop()

    def __enter__(self) -> 'GpioLifecycleManager':
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - release the lines."""
        self.close()
