################################################################################
# File Name: test_platform_utils.py
# Purpose/Description: Tests for platform detection utilities
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
Tests for the platform_utils module.

Run with:
    pytest tests/test_platform_utils.py -v
"""

import sys
from pathlib import Path
from unittest.mock import mock_open, patch

srcPath = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(srcPath))

from onoff.platform_utils import getKernelRelease, hasSysfsGpio, isRaspberryPi


class TestIsRaspberryPi:
    """Tests for isRaspberryPi() function."""

    def test_isRaspberryPi_linuxWithRaspberryInModel_returnsTrue(self):
        """
        Given: Linux system with 'Raspberry Pi' in /proc/device-tree/model
        When: isRaspberryPi() is called
        Then: Returns True
        """
        mockModelContent = "Raspberry Pi 4 Model B Rev 1.4\x00"

        with patch('platform.system', return_value='Linux'):
            with patch('builtins.open', mock_open(read_data=mockModelContent)):
                with patch('os.path.exists', return_value=True):
                    assert isRaspberryPi() is True

    def test_isRaspberryPi_otherBoard_returnsFalse(self):
        """
        Given: Linux system with a non-Pi model string
        When: isRaspberryPi() is called
        Then: Returns False
        """
        with patch('platform.system', return_value='Linux'):
            with patch('builtins.open', mock_open(read_data="Pine64 RockPro64\x00")):
                with patch('os.path.exists', return_value=True):
                    assert isRaspberryPi() is False

    def test_isRaspberryPi_notLinux_returnsFalse(self):
        """
        Given: A non-Linux system
        When: isRaspberryPi() is called
        Then: Returns False
        """
        with patch('platform.system', return_value='Windows'):
            assert isRaspberryPi() is False

    def test_isRaspberryPi_modelUnreadable_returnsFalse(self):
        """
        Given: The model file exists but cannot be read
        When: isRaspberryPi() is called
        Then: Returns False without raising
        """
        with patch('platform.system', return_value='Linux'):
            with patch('os.path.exists', return_value=True):
                with patch('builtins.open', side_effect=PermissionError('denied')):
                    assert isRaspberryPi() is False


class TestHasSysfsGpio:
    """Tests for hasSysfsGpio() function."""

    def test_hasSysfsGpio_exportPresent_returnsTrue(self, sysfsRoot):
        """
        Given: A gpio class directory with an export file
        When: hasSysfsGpio() is called
        Then: Returns True
        """
        assert hasSysfsGpio(str(sysfsRoot)) is True

    def test_hasSysfsGpio_missingRoot_returnsFalse(self, tmp_path):
        """
        Given: A directory without an export file
        When: hasSysfsGpio() is called
        Then: Returns False
        """
        assert hasSysfsGpio(str(tmp_path / 'gpio')) is False


class TestGetKernelRelease:
    """Tests for getKernelRelease() function."""

    def test_getKernelRelease_returnsPlatformRelease(self):
        """
        Given: A running kernel
        When: getKernelRelease() is called
        Then: Returns platform.release()
        """
        with patch('platform.release', return_value='6.1.0-rpi7-rpi-v8'):
            assert getKernelRelease() == '6.1.0-rpi7-rpi-v8'
