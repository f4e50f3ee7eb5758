################################################################################
# File Name: main.py
# Purpose/Description: Main application entry point
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
Main application entry point.

Runs the on/off controller as a service: binds the GPIO lines, watches the
shutdown button until SIGINT/SIGTERM, then releases the lines. Also offers
one-shot reboot/shutdown notifications for use from systemd units, and a
dry run that only reports which lines would be bound.

Usage:
    python src/main.py --help
    python src/main.py --config path/to/config.json
    python src/main.py --dry-run
    python src/main.py --notify shutdown
"""

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Any

# Resolve project paths relative to this script (not CWD)
srcPath = Path(__file__).resolve().parent
if str(srcPath) not in sys.path:
    sys.path.insert(0, str(srcPath))

DEFAULT_CONFIG = str(srcPath / 'onoff' / 'config.json')

from common.config_validator import ConfigValidationError
from common.error_handler import ConfigurationError, HardwareError, formatError, handleError
from common.logging_config import getLogger, setupLogging
from onoff import __version__
from onoff.lifecycle_manager import ROLE_MODES, PinConfig
from onoff.pin_translator import UNSET_PIN, tryParsePin
from onoff.plugin import OnOffPlugin

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_RUNTIME_ERROR = 2
EXIT_UNKNOWN_ERROR = 3


def parseArgs(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (default: sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description='Audiophonics on/off GPIO controller',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py                     Run the controller service
  python main.py --config my.json    Run with a custom config
  python main.py --dry-run           Show which lines would be bound
  python main.py --notify shutdown   Pulse the soft shutdown line and exit
        '''
    )

    parser.add_argument(
        '--config', '-c',
        default=DEFAULT_CONFIG,
        help='Path to configuration file (default: src/onoff/config.json)'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Resolve pins without binding any GPIO line'
    )

    parser.add_argument(
        '--notify',
        choices=['reboot', 'shutdown'],
        help='Signal the power board of a reboot or shutdown, then exit'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose (debug) logging'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(argv)


def loadPlugin(configPath: str) -> OnOffPlugin:
    """
    Create the plugin and load its configuration.

    Args:
        configPath: Path to configuration file

    Returns:
        Plugin ready for onStart()

    Raises:
        ConfigurationError: If configuration is invalid
    """
    plugin = OnOffPlugin(configPath)
    try:
        plugin.onAppStart()
    except ConfigValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e
    return plugin


def describePins(plugin: OnOffPlugin) -> dict[str, int | None]:
    """
    Resolve the physical pin of each role without binding anything.

    Returns:
        Physical pin per role, None for unbound roles
    """
    logger = getLogger(__name__)
    manager = plugin.manager
    manager.refreshGpioPrefix()
    pinConfig = PinConfig.fromStore(plugin.store)

    plan: dict[str, int | None] = {}
    for role in ROLE_MODES:
        value = pinConfig.forRole(role)
        if tryParsePin(value) == UNSET_PIN:
            plan[role] = None
            logger.info(f"{role}: not configured")
        else:
            plan[role] = manager.physicalPin(value)
            logger.info(f"{role}: logical {value} -> GPIO {plan[role]}")
    return plan


def runService(plugin: OnOffPlugin, stopEvent: threading.Event | None = None) -> int:
    """
    Bind the lines and wait for SIGINT/SIGTERM.

    Args:
        plugin: Loaded plugin
        stopEvent: Event that ends the wait (default: set by signal handlers)

    Returns:
        Exit code
    """
    logger = getLogger(__name__)
    stopEvent = stopEvent or threading.Event()

    def handleSignal(signum: int, frame: Any) -> None:
        logger.info(f"Received signal {signal.Signals(signum).name}, stopping")
        stopEvent.set()

    originalHandlers = {signal.SIGINT: signal.signal(signal.SIGINT, handleSignal)}
    if hasattr(signal, 'SIGTERM'):
        originalHandlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, handleSignal)

    try:
        plugin.onStart()
        logger.info("On/off controller running")
        stopEvent.wait()
    finally:
        plugin.onStop()
        for signum, handler in originalHandlers.items():
            signal.signal(signum, handler)

    return EXIT_SUCCESS


def runNotify(plugin: OnOffPlugin, event: str) -> int:
    """
    Send a one-shot reboot or shutdown notification.

    A reboot leaves the soft shutdown line asserted; a shutdown pulses it
    and releases the lines afterwards.

    Returns:
        Exit code
    """
    plugin.onStart()
    if event == 'reboot':
        plugin.onReboot()
        return EXIT_SUCCESS

    try:
        plugin.onShutdown().result()
    finally:
        plugin.onStop()
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parseArgs(argv)

    logLevel = 'DEBUG' if args.verbose else 'INFO'
    setupLogging(level=logLevel)
    logger = getLogger(__name__)

    try:
        plugin = loadPlugin(args.config)

        loggingOptions = plugin.options['logging']
        if not args.verbose and (
            loggingOptions['level'] != logLevel or loggingOptions['file']
        ):
            setupLogging(level=loggingOptions['level'], logFile=loggingOptions['file'])

        if args.dry_run:
            logger.info("DRY RUN MODE - resolving pins without binding")
            describePins(plugin)
            return EXIT_SUCCESS

        if args.notify:
            return runNotify(plugin, args.notify)

        return runService(plugin)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    except HardwareError as e:
        logger.error(formatError(e))
        return EXIT_RUNTIME_ERROR

    except KeyboardInterrupt:
        logger.warning("Application interrupted by user")
        return EXIT_RUNTIME_ERROR

    except Exception as e:
        handleError(e, reraise=False)
        return EXIT_UNKNOWN_ERROR


if __name__ == '__main__':
    sys.exit(main())
