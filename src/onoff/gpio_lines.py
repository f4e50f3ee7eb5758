################################################################################
# File Name: gpio_lines.py
# Purpose/Description: Exclusively owned GPIO line bindings (sysfs and gpiozero)
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
Exclusively owned GPIO line bindings.

A line is opened in one of three modes (plain output, input with
both-edge detection, output driven high at bind time) and offers the same
small surface regardless of backend:

    line.write(level)          synchronous write
    line.writeAsync(level)     write on a worker thread, returns a Future
    line.read()                current level
    line.watch(callback)       callback(value) on every edge
    line.unwatchAll()          drop all edge callbacks
    line.unexport()            release the line (idempotent)

Two backends are provided:
- Sysfs: drives /sys/class/gpio directly. Lines are addressed by their
  global number, which carries the chip prefix on kernels >= 6.
- gpiozero: uses DigitalOutputDevice/DigitalInputDevice. Lines are
  addressed by their chip-relative BCM number.

Usage:
    from onoff.gpio_lines import LineMode, createLineFactory

    factory = createLineFactory('auto')
    led = factory.open(534, LineMode.OUTPUT_HIGH)
    led.unexport()
"""

import logging
import os
import select
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from enum import Enum
from pathlib import Path
from typing import Protocol

from common.error_handler import HardwareError

from .platform_utils import SYSFS_GPIO_ROOT, hasSysfsGpio, isRaspberryPi

logger = logging.getLogger(__name__)

EdgeCallback = Callable[[int], None]


# ================================================================================
# GPIO Line Exceptions
# ================================================================================


class GpioLineError(HardwareError):
    """Base exception for GPIO line errors."""
    pass


class GpioBindError(GpioLineError):
    """Raised when a line cannot be opened (busy, permission, no such pin)."""
    pass


class GpioNotAvailableError(GpioLineError):
    """Raised when the requested GPIO backend is not available."""
    pass


# ================================================================================
# Line Modes and Interfaces
# ================================================================================


class LineMode(Enum):
    """Direction/mode a line is bound with."""
    OUTPUT = 'out'
    INPUT_BOTH_EDGES = 'in'
    OUTPUT_HIGH = 'high'

    @property
    def isOutput(self) -> bool:
        return self is not LineMode.INPUT_BOTH_EDGES

    @property
    def edge(self) -> str:
        return 'both' if self is LineMode.INPUT_BOTH_EDGES else 'none'


class GpioLine(Protocol):
    """Bound GPIO line."""

    pin: int
    mode: LineMode

    def write(self, level: int) -> None: ...

    def writeAsync(self, level: int) -> Future: ...

    def read(self) -> int: ...

    def watch(self, callback: EdgeCallback) -> None: ...

    def unwatchAll(self) -> None: ...

    def unexport(self) -> None: ...


class LineFactory(Protocol):
    """Opens GPIO lines by number."""

    # True when lines are addressed by global (prefixed) sysfs number
    usesGlobalNumbering: bool

    def open(self, pin: int, mode: LineMode) -> GpioLine: ...


def _writeInBackground(line: GpioLine, level: int) -> Future:
    """Run line.write(level) on a short-lived thread."""
    future: Future = Future()

    def runner() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            line.write(level)
        except Exception as e:
            future.set_exception(e)
        else:
            future.set_result(None)

    threading.Thread(
        target=runner, name=f"gpio{line.pin}-write", daemon=True
    ).start()
    return future


# ================================================================================
# Sysfs Backend
# ================================================================================


class SysfsGpioLine:
    """
    GPIO line driven through the Linux sysfs interface.

    Edge events are detected by polling the ``value`` file for POLLPRI on a
    daemon watcher thread; callbacks run on that thread in event order.

    Attributes:
        pin: Global line number
        mode: Mode the line was bound with
        isOpen: Whether the line is still exported by this object
    """

    def __init__(
        self,
        pin: int,
        mode: LineMode,
        root: str = SYSFS_GPIO_ROOT,
        exportTimeout: float = 1.0
    ):
        """
        Export and configure a line.

        Args:
            pin: Global line number
            mode: Line mode
            root: sysfs GPIO class directory
            exportTimeout: Seconds to wait for the gpioN directory to appear

        Raises:
            ValueError: If pin is negative
            GpioBindError: If the line cannot be exported or configured
        """
        if pin < 0:
            raise ValueError("GPIO pin must be non-negative")

        self.pin = pin
        self.mode = mode
        self._root = Path(root)
        self._path = self._root / f"gpio{pin}"
        self._exportTimeout = exportTimeout

        self._callbacks: list[EdgeCallback] = []
        self._lock = threading.Lock()
        self._watcher: threading.Thread | None = None
        self._wakeFds: tuple[int, int] | None = None
        self._isOpen = False

        self._export()

    def _writeAttr(self, path: Path, value: str) -> None:
        try:
            with path.open('w') as handle:
                handle.write(value)
        except OSError as e:
            raise GpioLineError(
                f"Failed to write {value!r} to {path}: {e}",
                details={'pin': self.pin, 'path': str(path)}
            ) from e

    def _attrNames(self) -> list[str]:
        names = ['direction', 'value']
        if not self.mode.isOutput:
            names.append('edge')
        return names

    def _isWritable(self) -> bool:
        return self._path.exists() and all(
            os.access(self._path / name, os.W_OK) for name in self._attrNames()
        )

    def _waitUntilWritable(self) -> None:
        """
        Wait for the line directory and its attributes to become writable.

        udev applies the gpio group permissions shortly after the directory
        appears. Once the deadline passes with the directory present, the
        following write reports the real error.

        Raises:
            GpioBindError: If the directory never appears
        """
        deadline = time.monotonic() + self._exportTimeout
        while not self._isWritable():
            if time.monotonic() > deadline:
                if not self._path.exists():
                    raise GpioBindError(
                        f"Timed out waiting for {self._path} to appear",
                        details={'pin': self.pin}
                    )
                logger.warning(f"GPIO {self.pin} attributes still not writable after export")
                return
            time.sleep(0.01)

    def _export(self) -> None:
        try:
            if not self._path.exists():
                self._writeAttr(self._root / 'export', str(self.pin))
            self._waitUntilWritable()

            self._writeAttr(self._path / 'direction', self.mode.value)
            if not self.mode.isOutput:
                self._writeAttr(self._path / 'edge', self.mode.edge)
        except GpioBindError:
            raise
        except GpioLineError as e:
            raise GpioBindError(
                f"Cannot bind GPIO {self.pin}: {e.message}",
                details=e.details
            ) from e

        self._isOpen = True
        logger.debug(f"sysfs GPIO {self.pin} exported (mode={self.mode.value})")

    def _ensureOpen(self) -> None:
        if not self._isOpen:
            raise GpioLineError(f"GPIO {self.pin} is not exported", details={'pin': self.pin})

    def write(self, level: int) -> None:
        """
        Write a logical level.

        Raises:
            GpioLineError: If the line is closed or not an output
        """
        self._ensureOpen()
        if not self.mode.isOutput:
            raise GpioLineError(f"GPIO {self.pin} is an input", details={'pin': self.pin})
        self._writeAttr(self._path / 'value', '1' if level else '0')

    def writeAsync(self, level: int) -> Future:
        """Write a level on a worker thread; the future resolves when done."""
        return _writeInBackground(self, level)

    def read(self) -> int:
        """Read the current level (0 or 1)."""
        self._ensureOpen()
        try:
            raw = (self._path / 'value').read_text().strip()
        except OSError as e:
            raise GpioLineError(f"Failed to read GPIO {self.pin}: {e}") from e
        return 1 if raw == '1' else 0

    def watch(self, callback: EdgeCallback) -> None:
        """
        Register an edge callback, starting the watcher thread if needed.

        Args:
            callback: Called with the line value after each edge
        """
        self._ensureOpen()
        with self._lock:
            self._callbacks.append(callback)
            if self._watcher is not None:
                return

            valueFd = os.open(self._path / 'value', os.O_RDONLY | os.O_NONBLOCK)
            self._wakeFds = os.pipe()
            self._watcher = threading.Thread(
                target=self._watchLoop,
                args=(valueFd, self._wakeFds[0]),
                name=f"gpio{self.pin}-watch",
                daemon=True
            )
            self._watcher.start()

        logger.debug(f"Watching GPIO {self.pin} for edges")

    def _watchLoop(self, valueFd: int, wakeFd: int) -> None:
        poller = select.poll()
        poller.register(valueFd, select.POLLPRI | select.POLLERR)
        poller.register(wakeFd, select.POLLIN)

        try:
            # A fresh value fd reports one pending event; consume it
            os.read(valueFd, 8)

            while True:
                events = poller.poll()
                if any(fd == wakeFd for fd, _ in events):
                    return

                os.lseek(valueFd, 0, os.SEEK_SET)
                raw = os.read(valueFd, 8).strip()
                self._dispatch(1 if raw == b'1' else 0)
        except OSError as e:
            logger.error(f"Edge watcher for GPIO {self.pin} stopped: {e}")
        finally:
            os.close(valueFd)

    def _dispatch(self, value: int) -> None:
        with self._lock:
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(value)
            except Exception as e:
                logger.error(f"Error in edge callback for GPIO {self.pin}: {e}")

    def unwatchAll(self) -> None:
        """Remove all edge callbacks and stop the watcher thread."""
        with self._lock:
            self._callbacks.clear()
            watcher, self._watcher = self._watcher, None
            wakeFds, self._wakeFds = self._wakeFds, None

        if watcher is None:
            return

        os.write(wakeFds[1], b'x')
        if watcher is not threading.current_thread():
            watcher.join(timeout=1.0)
        os.close(wakeFds[0])
        os.close(wakeFds[1])

    def unexport(self) -> None:
        """
        Release the line.

        Safe to call multiple times; later calls are no-ops.

        Raises:
            GpioLineError: If the unexport write fails (the line is still
                considered released by this object)
        """
        if not self._isOpen:
            return

        self.unwatchAll()
        self._isOpen = False
        self._writeAttr(self._root / 'unexport', str(self.pin))
        logger.debug(f"sysfs GPIO {self.pin} unexported")

    @property
    def isOpen(self) -> bool:
        """Check whether the line is still exported by this object."""
        return self._isOpen


class SysfsLineFactory:
    """Opens SysfsGpioLine objects under a sysfs GPIO root."""

    usesGlobalNumbering = True

    def __init__(self, root: str = SYSFS_GPIO_ROOT, exportTimeout: float = 1.0):
        self.root = root
        self.exportTimeout = exportTimeout

    def open(self, pin: int, mode: LineMode) -> SysfsGpioLine:
        return SysfsGpioLine(pin, mode, root=self.root, exportTimeout=self.exportTimeout)


# ================================================================================
# gpiozero Backend
# ================================================================================


class GpiozeroLine:
    """
    GPIO line backed by a gpiozero device.

    Both-edge detection maps onto ``when_activated`` (value 1) and
    ``when_deactivated`` (value 0).
    """

    def __init__(self, pin: int, mode: LineMode, pinFactory=None):
        """
        Open a gpiozero device for the line.

        Args:
            pin: Chip-relative (BCM) line number
            mode: Line mode
            pinFactory: Optional gpiozero pin factory (default: gpiozero's own)

        Raises:
            GpioNotAvailableError: If gpiozero cannot be imported
            GpioBindError: If the device cannot be created
        """
        try:
            from gpiozero import DigitalInputDevice, DigitalOutputDevice
        except (ImportError, RuntimeError) as e:
            raise GpioNotAvailableError(f"gpiozero import failed: {e}") from e

        self.pin = pin
        self.mode = mode
        self._callbacks: list[EdgeCallback] = []
        self._lock = threading.Lock()
        self._isOpen = False

        try:
            if mode is LineMode.INPUT_BOTH_EDGES:
                # Floating input, same as a sysfs 'in' line
                self._device = DigitalInputDevice(
                    pin, pull_up=None, active_state=True, pin_factory=pinFactory
                )
            else:
                initialValue = True if mode is LineMode.OUTPUT_HIGH else None
                self._device = DigitalOutputDevice(
                    pin, initial_value=initialValue, pin_factory=pinFactory
                )
        except Exception as e:
            raise GpioBindError(
                f"Cannot bind GPIO {pin}: {e}", details={'pin': pin}
            ) from e

        self._isOpen = True

    def _ensureOpen(self) -> None:
        if not self._isOpen:
            raise GpioLineError(f"GPIO {self.pin} is closed", details={'pin': self.pin})

    def write(self, level: int) -> None:
        self._ensureOpen()
        if not self.mode.isOutput:
            raise GpioLineError(f"GPIO {self.pin} is an input", details={'pin': self.pin})
        self._device.value = 1 if level else 0

    def writeAsync(self, level: int) -> Future:
        return _writeInBackground(self, level)

    def read(self) -> int:
        self._ensureOpen()
        return 1 if self._device.value else 0

    def watch(self, callback: EdgeCallback) -> None:
        self._ensureOpen()
        if self.mode.isOutput:
            raise GpioLineError(f"GPIO {self.pin} is an output", details={'pin': self.pin})
        with self._lock:
            self._callbacks.append(callback)
        self._device.when_activated = lambda: self._dispatch(1)
        self._device.when_deactivated = lambda: self._dispatch(0)

    def _dispatch(self, value: int) -> None:
        with self._lock:
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(value)
            except Exception as e:
                logger.error(f"Error in edge callback for GPIO {self.pin}: {e}")

    def unwatchAll(self) -> None:
        with self._lock:
            self._callbacks.clear()
        if self._isOpen and not self.mode.isOutput:
            self._device.when_activated = None
            self._device.when_deactivated = None

    def unexport(self) -> None:
        if not self._isOpen:
            return
        self.unwatchAll()
        self._isOpen = False
        self._device.close()

    @property
    def isOpen(self) -> bool:
        return self._isOpen


class GpiozeroLineFactory:
    """Opens GpiozeroLine objects, optionally on an explicit pin factory."""

    usesGlobalNumbering = False

    def __init__(self, pinFactory=None):
        self.pinFactory = pinFactory

    def open(self, pin: int, mode: LineMode) -> GpiozeroLine:
        return GpiozeroLine(pin, mode, pinFactory=self.pinFactory)


# ================================================================================
# Backend Selection
# ================================================================================

BACKENDS = ('auto', 'sysfs', 'gpiozero')


def _gpiozeroImportable() -> bool:
    try:
        import gpiozero  # noqa: F401
    except (ImportError, RuntimeError) as e:
        logger.debug(f"gpiozero not importable: {e}")
        return False
    return True


def createLineFactory(backend: str = 'auto', root: str = SYSFS_GPIO_ROOT) -> LineFactory:
    """
    Create the line factory for a backend name.

    'auto' prefers sysfs when its export file exists, then gpiozero on a
    Raspberry Pi, and otherwise still returns sysfs so that each bind
    failure is reported against its role.

    Args:
        backend: 'auto', 'sysfs' or 'gpiozero'
        root: sysfs GPIO class directory

    Returns:
        A LineFactory

    Raises:
        ValueError: If the backend name is unknown
        GpioNotAvailableError: If 'gpiozero' is requested but not importable
    """
    if backend not in BACKENDS:
        raise ValueError(f"Unknown GPIO backend {backend!r}; expected one of {BACKENDS}")

    if backend == 'sysfs':
        return SysfsLineFactory(root)

    if backend == 'gpiozero':
        if not _gpiozeroImportable():
            raise GpioNotAvailableError("gpiozero backend requested but not importable")
        return GpiozeroLineFactory()

    if hasSysfsGpio(root):
        logger.info("Using sysfs GPIO backend")
        return SysfsLineFactory(root)

    if isRaspberryPi() and _gpiozeroImportable():
        logger.info("sysfs GPIO not available - using gpiozero backend")
        return GpiozeroLineFactory()

    logger.warning(
        "No GPIO backend detected - GPIO lines will fail to bind on this system"
    )
    return SysfsLineFactory(root)
