################################################################################
# File Name: settings.py
# Purpose/Description: Settings page for the GPIO pin assignments
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
Settings page for the GPIO pin assignments.

Builds the host UI description (one section, three number inputs filled
with the stored pins) and applies the page's save payload to the store.
Changes take effect the next time the lines are bound.

Labels are ``TRANSLATE.<KEY>`` placeholders resolved from
``i18n/strings_<language>.json``; keys missing there (or a missing file)
fall back to ``i18n/strings_en.json``.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any

from common.error_handler import ConfigurationError

from .lifecycle_manager import ROLE_BOOT_OK, ROLE_SHUTDOWN_BUTTON, ROLE_SOFT_SHUTDOWN

logger = logging.getLogger(__name__)

PLUGIN_ENDPOINT = 'system_hardware/audiophonicsonoff'

I18N_DIR = Path(__file__).resolve().parent / 'i18n'
DEFAULT_LANGUAGE = 'en'
TRANSLATE_PREFIX = 'TRANSLATE.'

FIELD_LABELS = {
    ROLE_SOFT_SHUTDOWN: 'TRANSLATE.SOFT_SHUTDOWN',
    ROLE_SHUTDOWN_BUTTON: 'TRANSLATE.SHUTDOWN_BUTTON',
    ROLE_BOOT_OK: 'TRANSLATE.BOOT_OK',
}

SETTINGS_PAGE: dict[str, Any] = {
    'page': {'label': 'TRANSLATE.PAGE_LABEL'},
    'sections': [
        {
            'id': 'section_gpio',
            'element': 'section',
            'label': 'TRANSLATE.SECTION_GPIO',
            'icon': 'fa-plug',
            'onSave': {
                'type': 'controller',
                'endpoint': PLUGIN_ENDPOINT,
                'method': 'updateButtonConfig',
            },
            'saveButton': {
                'label': 'TRANSLATE.SAVE',
                'data': list(FIELD_LABELS),
            },
            'content': [
                {
                    'id': key,
                    'type': 'number',
                    'element': 'input',
                    'label': label,
                    'attributes': [{'min': 0}],
                    'value': 0,
                }
                for key, label in FIELD_LABELS.items()
            ],
        }
    ],
}


def _readStrings(path: Path) -> dict[str, str]:
    try:
        with open(path, encoding='utf-8') as f:
            strings = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in strings file {path}: {e}") from e

    if not isinstance(strings, dict):
        raise ConfigurationError(f"Strings file {path} must contain a JSON object")
    return strings


def loadStrings(language: str | None = None, i18nDir: Path = I18N_DIR) -> dict[str, str]:
    """
    Load UI strings for a language, filling gaps from English.

    Args:
        language: Language code such as 'fr' (default: English)
        i18nDir: Directory holding strings_<language>.json files

    Returns:
        Translation key to text

    Raises:
        ConfigurationError: If a strings file is not a JSON object
    """
    strings = _readStrings(Path(i18nDir) / f'strings_{DEFAULT_LANGUAGE}.json')

    language = language or DEFAULT_LANGUAGE
    if language != DEFAULT_LANGUAGE:
        path = Path(i18nDir) / f'strings_{language}.json'
        if path.exists():
            strings.update(_readStrings(path))
        else:
            logger.debug(f"No strings for language '{language}' - using English")

    return strings


def translate(node: Any, strings: dict[str, str]) -> Any:
    """Replace TRANSLATE.<KEY> placeholders in a page description, recursively."""
    if isinstance(node, dict):
        return {k: translate(v, strings) for k, v in node.items()}
    if isinstance(node, list):
        return [translate(v, strings) for v in node]
    if isinstance(node, str) and node.startswith(TRANSLATE_PREFIX):
        return strings.get(node[len(TRANSLATE_PREFIX):], node)
    return node


def getUiConfig(store: Any, language: str | None = None) -> dict[str, Any]:
    """
    Build the settings page with the current pin values.

    Args:
        store: Object with ``get(key)`` (e.g. ConfigStore)
        language: UI language code (default: English)

    Returns:
        Settings page description
    """
    uiconf = translate(copy.deepcopy(SETTINGS_PAGE), loadStrings(language))
    for field in uiconf['sections'][0]['content']:
        field['value'] = store.get(field['id'])

    logger.info("Populated config screen")
    return uiconf


def updateButtonConfig(store: Any, data: dict[str, Any]) -> dict[str, str]:
    """
    Store the pins submitted by the settings page and persist them.

    Args:
        store: ConfigStore to update
        data: Payload with soft_shutdown, shutdown_button and boot_ok

    Returns:
        Toast message for the host UI
    """
    for key in FIELD_LABELS:
        store.set(key, data.get(key))

    store.save()
    logger.info(
        "Updated GPIO configuration: "
        + ', '.join(f"{key}={data.get(key)}" for key in FIELD_LABELS)
    )
    return {'type': 'success', 'message': 'Successfully saved the new configuration.'}
