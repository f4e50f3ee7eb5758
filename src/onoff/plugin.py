################################################################################
# File Name: plugin.py
# Purpose/Description: Host lifecycle hooks for the on/off controller
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
Host lifecycle hooks for the on/off controller.

OnOffPlugin is the object a host runtime (or src/main.py) drives. It loads
the configuration, builds the GpioLifecycleManager with the configured
backend, probe and shutdown action, and maps each host hook onto it:

    onAppStart   load config.json and build the manager
    onStart      bind lines and watch the button
    onStop       release lines
    onRestart    onStop + onStart
    onReboot     assert soft_shutdown
    onShutdown   pulse soft_shutdown; returns a Future
    onInstall    log only
    onUninstall  release lines

Usage:
    from onoff.plugin import OnOffPlugin

    plugin = OnOffPlugin('config.json')
    plugin.onAppStart()
    plugin.onStart()
    ...
    plugin.onShutdown().result()
    plugin.onStop()
"""

import logging
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path
from typing import Any

from common.config_validator import ConfigValidator

from . import settings
from .config_store import ConfigStore
from .gpio_lines import LineFactory, createLineFactory
from .gpio_prefix import GpioPrefixProbe
from .lifecycle_manager import GpioLifecycleManager, PinConfig
from .shutdown_action import SystemShutdownAction

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = 'config.json'


class OnOffPlugin:
    """
    Host-facing controller for the Audiophonics on/off board.

    Collaborators left as None are built from the configuration on
    onAppStart().

    Attributes:
        configPath: Path of the plugin config.json
        store: Loaded ConfigStore
        options: Validated configuration (with defaults applied)
        manager: GpioLifecycleManager, or None before onAppStart()
    """

    def __init__(
        self,
        configPath: str | Path,
        lineFactory: LineFactory | None = None,
        shutdownAction: Callable[[], Any] | None = None,
        prefixProbe: GpioPrefixProbe | None = None,
        validator: ConfigValidator | None = None
    ):
        self._configPath = Path(configPath)
        self._lineFactory = lineFactory
        self._shutdownAction = shutdownAction
        self._prefixProbe = prefixProbe
        self._validator = validator or ConfigValidator()

        self._store = ConfigStore()
        self._options: dict[str, Any] = {}
        self._manager: GpioLifecycleManager | None = None

    # ----------------------------------------------------------------------------
    # Configuration
    # ----------------------------------------------------------------------------

    def getConf(self) -> dict[str, Any]:
        """
        (Re)load config.json and validate it.

        Returns:
            Validated options with defaults applied
        """
        self._store.loadFile(self._configPath)
        self._options = self._validator.validate(self._store.toDict())
        return self._options

    def getConfigurationFiles(self) -> list[str]:
        return [CONFIG_FILE_NAME]

    def _buildManager(self) -> GpioLifecycleManager:
        gpio = self._options['gpio']
        shutdown = self._options['shutdown']

        lineFactory = self._lineFactory or createLineFactory(gpio['backend'])
        shutdownAction = self._shutdownAction or SystemShutdownAction(
            shutdown['command'], timeout=shutdown['timeout']
        )
        prefixProbe = self._prefixProbe or GpioPrefixProbe(
            command=gpio['probeCommand'],
            user=gpio['probeUser'],
            group=gpio['probeGroup'],
            timeout=gpio['probeTimeout']
        )

        return GpioLifecycleManager(
            lineFactory,
            shutdownAction,
            prefixProbe=prefixProbe,
            pulseSeconds=float(shutdown['pulseSeconds'])
        )

    # ----------------------------------------------------------------------------
    # Host lifecycle hooks
    # ----------------------------------------------------------------------------

    def onAppStart(self) -> None:
        """Load configuration and build the lifecycle manager."""
        logger.info("Audiophonics on/off initiated")
        self.getConf()
        self._manager = self._buildManager()

    def onStart(self) -> None:
        """Bind the configured GPIO lines."""
        if self._manager is None:
            self.onAppStart()
        self._manager.start(PinConfig.fromStore(self._store))

    def onStop(self) -> None:
        """Release the GPIO lines. Safe to call multiple times."""
        logger.info("Performing onStop action")
        if self._manager is not None:
            self._manager.stop()

    def onRestart(self) -> None:
        """Release and rebind the lines with the stored pins."""
        logger.info("Performing onRestart action")
        self.onStop()
        self.onStart()

    def onReboot(self) -> None:
        """Assert the soft shutdown line ahead of a reboot."""
        if self._manager is None:
            logger.warning("Reboot notification before start - nothing to signal")
            return
        self._manager.notifyReboot()

    def onShutdown(self) -> Future:
        """
        Pulse the soft shutdown line ahead of a power-off.

        Returns:
            Future resolved once the pulse completes
        """
        if self._manager is None:
            logger.warning("Shutdown notification before start - nothing to signal")
            future: Future = Future()
            future.set_result(None)
            return future
        return self._manager.notifyShutdown()

    def onInstall(self) -> None:
        logger.info("Performing onInstall action")

    def onUninstall(self) -> None:
        logger.info("Performing onUninstall action")
        self.onStop()

    # ----------------------------------------------------------------------------
    # Settings page
    # ----------------------------------------------------------------------------

    def getUiConfig(self) -> dict[str, Any]:
        """Build the settings page from freshly loaded configuration."""
        self.getConf()
        logger.info("Loaded the previous config")
        return settings.getUiConfig(self._store, self._options['ui']['language'])

    def setUiConfig(self, data: dict[str, Any]) -> None:
        logger.info("Updating UI config")

    def updateButtonConfig(self, data: dict[str, Any]) -> dict[str, str]:
        """
        Save new pin assignments.

        They take effect on the next onStart()/onRestart().
        """
        if self._store.path is None:
            self._store.path = self._configPath
        return settings.updateButtonConfig(self._store, data)

    # ----------------------------------------------------------------------------
    # Properties
    # ----------------------------------------------------------------------------

    @property
    def configPath(self) -> Path:
        return self._configPath

    @property
    def store(self) -> ConfigStore:
        return self._store

    @property
    def options(self) -> dict[str, Any]:
        return self._options

    @property
    def manager(self) -> GpioLifecycleManager | None:
        return self._manager
