################################################################################
# File Name: conftest.py
# Purpose/Description: Pytest fixtures and configuration
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
Pytest configuration and shared fixtures.

Fixtures defined here are available to all test files automatically.

Usage:
    def test_something(fakeLineFactory, sysfsRoot):
        # fakeLineFactory and sysfsRoot are automatically injected
        pass
"""

import json
import sys
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
srcPath = Path(__file__).parent.parent / 'src'
if str(srcPath) not in sys.path:
    sys.path.insert(0, str(srcPath))


# ================================================================================
# Fake GPIO Lines
# ================================================================================

class FakeLine:
    """In-memory GPIO line recording every operation."""

    def __init__(self, pin: int, mode: Any, journal: List[tuple]):
        self.pin = pin
        self.mode = mode
        self.writes: List[int] = []
        self.callbacks: List[Any] = []
        self.unwatchCount = 0
        self.unexportCount = 0
        self.failUnexport = False
        self.failUnwatch = False
        self._journal = journal

    def write(self, level: int) -> None:
        self.writes.append(level)
        self._journal.append(('write', self.pin, level))

    def writeAsync(self, level: int) -> Future:
        future: Future = Future()
        self.write(level)
        future.set_result(None)
        return future

    def read(self) -> int:
        return self.writes[-1] if self.writes else 0

    def watch(self, callback: Any) -> None:
        self.callbacks.append(callback)
        self._journal.append(('watch', self.pin))

    def unwatchAll(self) -> None:
        self.callbacks.clear()
        self.unwatchCount += 1
        self._journal.append(('unwatchAll', self.pin))
        if self.failUnwatch:
            raise OSError(f"unwatch of {self.pin} failed")

    def unexport(self) -> None:
        self.unexportCount += 1
        self._journal.append(('unexport', self.pin))
        if self.failUnexport:
            raise OSError(f"unexport of {self.pin} failed")

    def fireEdge(self, value: int) -> None:
        for callback in list(self.callbacks):
            callback(value)


class FakeLineFactory:
    """Line factory handing out FakeLine objects."""

    def __init__(self, usesGlobalNumbering: bool = True):
        self.usesGlobalNumbering = usesGlobalNumbering
        self.opened: Dict[int, FakeLine] = {}
        self.openCalls: List[tuple] = []
        self.failPins: set = set()
        self.journal: List[tuple] = []

    def open(self, pin: int, mode: Any) -> FakeLine:
        self.openCalls.append((pin, mode))
        if pin in self.failPins:
            raise OSError(f"Device or resource busy: gpio{pin}")
        line = FakeLine(pin, mode, self.journal)
        self.opened[pin] = line
        self.journal.append(('open', pin, mode))
        return line


@pytest.fixture
def fakeLineFactory() -> FakeLineFactory:
    """Provide a line factory using global (sysfs) numbering."""
    return FakeLineFactory()


@pytest.fixture
def fixedProbe():
    """
    Provide a prefix probe returning 512.

    Returns:
        MagicMock with probe() -> 512
    """
    probe = MagicMock()
    probe.probe.return_value = 512
    return probe


@pytest.fixture
def failingProbe():
    """Provide a prefix probe that always fails."""
    probe = MagicMock()
    probe.probe.return_value = None
    return probe


# ================================================================================
# sysfs Fixtures
# ================================================================================

@pytest.fixture
def sysfsRoot(tmp_path: Path) -> Path:
    """
    Provide a fake /sys/class/gpio tree.

    Lines 17, 22 and 529 are pre-created as if already exported, since a
    plain directory does not react to writes on 'export'.
    """
    root = tmp_path / 'gpio'
    root.mkdir()
    (root / 'export').write_text('')
    (root / 'unexport').write_text('')
    (root / 'gpiochip512').mkdir()
    for pin in (17, 22, 529):
        lineDir = root / f'gpio{pin}'
        lineDir.mkdir()
        (lineDir / 'direction').write_text('in')
        (lineDir / 'edge').write_text('none')
        (lineDir / 'value').write_text('0')
    return root


# ================================================================================
# Configuration Fixtures
# ================================================================================

@pytest.fixture
def pinConfigFile(tmp_path: Path) -> Path:
    """
    Provide a typed-leaf config.json with soft_shutdown=17, boot_ok=22.

    Returns:
        Path to the file
    """
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({
        'soft_shutdown': {'type': 'string', 'value': '17'},
        'shutdown_button': {'type': 'string', 'value': '0'},
        'boot_ok': {'type': 'string', 'value': '22'},
    }))
    return path


@pytest.fixture
def fullConfigFile(tmp_path: Path) -> Path:
    """Provide a config.json with all three pins set (4, 17, 22)."""
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({
        'soft_shutdown': {'type': 'string', 'value': '4'},
        'shutdown_button': {'type': 'string', 'value': '17'},
        'boot_ok': {'type': 'string', 'value': '22'},
        'shutdown': {'pulseSeconds': {'type': 'number', 'value': 0.05}},
    }))
    return path
