################################################################################
# File Name: test_settings.py
# Purpose/Description: Tests for the GPIO settings page
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
Tests for the settings module.

Run with:
    pytest tests/test_settings.py -v
"""

import json
import sys
from pathlib import Path

import pytest

srcPath = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(srcPath))

from common.error_handler import ConfigurationError
from onoff.config_store import ConfigStore
from onoff.settings import (
    FIELD_LABELS,
    PLUGIN_ENDPOINT,
    SETTINGS_PAGE,
    TRANSLATE_PREFIX,
    getUiConfig,
    loadStrings,
    translate,
    updateButtonConfig,
)


def loadStore(path: Path) -> ConfigStore:
    store = ConfigStore()
    store.loadFile(path)
    return store


class TestGetUiConfig:
    """Tests for getUiConfig."""

    def test_getUiConfig_fillsStoredPins(self, pinConfigFile):
        """
        Given: A store with soft_shutdown=17, shutdown_button=0, boot_ok=22
        When: getUiConfig is called
        Then: The three inputs carry those values in order
        """
        uiconf = getUiConfig(loadStore(pinConfigFile))

        content = uiconf['sections'][0]['content']
        assert [(f['id'], f['value']) for f in content] == [
            ('soft_shutdown', '17'),
            ('shutdown_button', '0'),
            ('boot_ok', '22'),
        ]

    def test_getUiConfig_doesNotMutateTemplate(self, pinConfigFile):
        """
        Given: The settings page template
        When: getUiConfig is called
        Then: The template keeps its default values
        """
        getUiConfig(loadStore(pinConfigFile))

        assert all(f['value'] == 0 for f in SETTINGS_PAGE['sections'][0]['content'])

    def test_settingsPage_savesThroughUpdateButtonConfig(self):
        """
        Given: The settings page section
        When: Its save target is read
        Then: Points at updateButtonConfig with all three fields
        """
        section = SETTINGS_PAGE['sections'][0]

        assert section['onSave']['endpoint'] == PLUGIN_ENDPOINT
        assert section['onSave']['method'] == 'updateButtonConfig'
        assert section['saveButton']['data'] == list(FIELD_LABELS)


class TestTranslations:
    """Tests for loadStrings, translate and translated pages."""

    def test_getUiConfig_defaultLanguage_usesEnglishLabels(self, pinConfigFile):
        """
        Given: No language
        When: getUiConfig is called
        Then: Every label is English text, no placeholder remains
        """
        uiconf = getUiConfig(loadStore(pinConfigFile))

        section = uiconf['sections'][0]
        assert section['label'] == 'GPIO configuration'
        assert [f['label'] for f in section['content']] == [
            'Soft shutdown GPIO', 'Shutdown button GPIO', 'Boot OK GPIO'
        ]
        assert TRANSLATE_PREFIX not in json.dumps(uiconf)

    def test_getUiConfig_french_fallsBackPerKey(self, pinConfigFile):
        """
        Given: French strings without a page label
        When: getUiConfig is called with 'fr'
        Then: French labels are used and the page label comes from English
        """
        uiconf = getUiConfig(loadStore(pinConfigFile), 'fr')

        assert uiconf['sections'][0]['label'] == 'Configuration des GPIO'
        assert uiconf['page']['label'] == 'Audiophonics on/off'

    def test_loadStrings_unknownLanguage_returnsEnglish(self):
        """
        Given: A language without a strings file
        When: loadStrings is called
        Then: Returns the English strings
        """
        assert loadStrings('xx') == loadStrings('en')

    def test_loadStrings_customDirectory(self, tmp_path):
        """
        Given: A strings directory with English and German files
        When: loadStrings('de') is called
        Then: German overrides English key by key
        """
        (tmp_path / 'strings_en.json').write_text('{"SAVE": "Save", "BOOT_OK": "Boot OK"}')
        (tmp_path / 'strings_de.json').write_text('{"SAVE": "Speichern"}')

        assert loadStrings('de', tmp_path) == {'SAVE': 'Speichern', 'BOOT_OK': 'Boot OK'}

    def test_loadStrings_invalidJson_raisesConfigurationError(self, tmp_path):
        """
        Given: A corrupt English strings file
        When: loadStrings is called
        Then: Raises ConfigurationError
        """
        (tmp_path / 'strings_en.json').write_text('{')

        with pytest.raises(ConfigurationError):
            loadStrings('en', tmp_path)

    def test_translate_unknownKey_keepsPlaceholder(self):
        """
        Given: A placeholder with no matching string
        When: translate is called
        Then: The placeholder is kept and other values pass through
        """
        page = {'label': 'TRANSLATE.MISSING', 'items': [{'value': 3}]}

        assert translate(page, {}) == page


class TestUpdateButtonConfig:
    """Tests for updateButtonConfig."""

    def test_update_storesAndPersistsPins(self, pinConfigFile):
        """
        Given: A save payload with new pins
        When: updateButtonConfig is called
        Then: The file holds the new values and a success toast is returned
        """
        store = loadStore(pinConfigFile)

        result = updateButtonConfig(
            store, {'soft_shutdown': '4', 'shutdown_button': '17', 'boot_ok': '22'}
        )

        saved = json.loads(pinConfigFile.read_text())
        assert saved['soft_shutdown']['value'] == '4'
        assert saved['shutdown_button']['value'] == '17'
        assert result['type'] == 'success'

    def test_update_missingField_storesNone(self, pinConfigFile):
        """
        Given: A payload missing boot_ok
        When: updateButtonConfig is called
        Then: boot_ok is stored empty, which leaves the line unbound
        """
        store = loadStore(pinConfigFile)

        updateButtonConfig(store, {'soft_shutdown': '4', 'shutdown_button': '0'})

        assert store.get('boot_ok') is None
