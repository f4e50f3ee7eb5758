################################################################################
# File Name: config_store.py
# Purpose/Description: Persisted key/value store for the controller configuration
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
Persisted key/value store for the controller configuration.

Reads and writes the plugin's config.json in the host's typed-leaf format,
where each setting is stored as ``{"type": ..., "value": ...}``:

    {
        "soft_shutdown": {"type": "string", "value": "4"},
        "gpio": {"backend": {"type": "string", "value": "auto"}}
    }

Plain values are accepted as well. Dotted keys address nested objects.

Usage:
    from onoff.config_store import ConfigStore

    store = ConfigStore()
    store.loadFile('/data/plugins/system_hardware/onoff/config.json')
    pin = store.get('soft_shutdown')
    store.set('boot_ok', '22')
    store.save()
"""

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from common.error_handler import ConfigurationError

logger = logging.getLogger(__name__)

# Keys of a typed leaf
LEAF_KEYS = frozenset({'type', 'value'})


def _isLeaf(node: Any) -> bool:
    return isinstance(node, dict) and 'value' in node and set(node) <= LEAF_KEYS


def _typeName(value: Any) -> str:
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, (list, tuple)):
        return 'array'
    if isinstance(value, dict):
        return 'object'
    return 'string'


def _resolve(node: Any) -> Any:
    """Strip typed leaves down to their values, recursively."""
    if _isLeaf(node):
        return copy.deepcopy(node['value'])
    if isinstance(node, dict):
        return {k: _resolve(v) for k, v in node.items()}
    return copy.deepcopy(node)


class ConfigStore:
    """
    Typed-leaf JSON configuration store.

    Attributes:
        path: File the store was loaded from (and saves to by default)
    """

    def __init__(self, data: dict[str, Any] | None = None):
        """
        Initialize the store.

        Args:
            data: Optional initial contents (typed leaves or plain values)
        """
        self._data: dict[str, Any] = copy.deepcopy(data) if data else {}
        self.path: Path | None = None

    def loadFile(self, path: str | Path) -> None:
        """
        Replace the store contents with a JSON file.

        A missing file yields an empty store.

        Args:
            path: Configuration file path

        Raises:
            ConfigurationError: If the file is not a JSON object
        """
        self.path = Path(path)

        if not self.path.exists():
            logger.warning(f"Configuration file not found at {self.path}; using empty config")
            self._data = {}
            return

        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in configuration file {self.path}: {e}",
                details={'path': str(self.path)}
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {self.path} must contain a JSON object",
                details={'path': str(self.path)}
            )

        self._data = data
        logger.debug(f"Loaded configuration from {self.path}")

    def _node(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split('.'):
            if _isLeaf(node) or not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def has(self, key: str) -> bool:
        """Check whether a key is present."""
        return self._node(key) is not None

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a value by dotted key.

        Args:
            key: Dotted key
            default: Returned when the key is absent

        Returns:
            The stored value (typed leaves are unwrapped)
        """
        node = self._node(key)
        if node is None:
            return default
        return _resolve(node)

    def set(self, key: str, value: Any) -> None:
        """
        Set a value by dotted key.

        An existing typed leaf keeps its declared type; new keys are stored
        as typed leaves.

        Args:
            key: Dotted key
            value: Value to store
        """
        parts = key.split('.')
        current = self._data

        for part in parts[:-1]:
            if not isinstance(current.get(part), dict) or _isLeaf(current[part]):
                current[part] = {}
            current = current[part]

        existing = current.get(parts[-1])
        if _isLeaf(existing):
            existing['value'] = value
        else:
            current[parts[-1]] = {'type': _typeName(value), 'value': value}

    def toDict(self) -> dict[str, Any]:
        """Get a plain nested copy of the contents with leaves unwrapped."""
        return _resolve(self._data)

    def save(self, path: str | Path | None = None) -> None:
        """
        Write the store to disk atomically.

        Args:
            path: Target file (default: the loaded path)

        Raises:
            ConfigurationError: If there is no target path
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ConfigurationError("No configuration file path to save to")

        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmpName = tempfile.mkstemp(dir=target.parent, prefix='.config-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, indent=4)
                f.write('\n')
            os.replace(tmpName, target)
        except BaseException:
            if os.path.exists(tmpName):
                os.unlink(tmpName)
            raise

        logger.debug(f"Saved configuration to {target}")
