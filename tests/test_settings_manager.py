"""
Integration tests for SettingsManager.

Tests the core settings functionality including:
- Defaults for the overlay keys
- Get/set operations and numeric normalisation
"""
import pytest

from core.settings.settings_manager import DEFAULTS, DEFAULT_BACKGROUND


class TestSettingsManagerBasics:
    """Basic get/set operations."""

    def test_defaults_are_populated(self, settings_manager):
        for key in DEFAULTS:
            assert settings_manager.get(key) is not None
        assert settings_manager.get('overlay.background') == DEFAULT_BACKGROUND
        assert settings_manager.get('overlay.fade_easing') == 'linear'

    def test_default_values(self, settings_manager):
        assert settings_manager.get_int('overlay.shape_count') == 1000
        assert settings_manager.get_float('overlay.interval_seconds') == 3.0
        assert settings_manager.get_float('overlay.fade_seconds') == 0.0

    def test_set_and_get(self, settings_manager):
        settings_manager.set('overlay.shape_count', 250)
        assert settings_manager.get_int('overlay.shape_count') == 250

    def test_numeric_strings_are_normalised(self, settings_manager):
        settings_manager.set('overlay.shape_count', "42")
        settings_manager.set('overlay.fade_seconds', "1.5")
        assert settings_manager.get_int('overlay.shape_count') == 42
        assert settings_manager.get_float('overlay.fade_seconds') == 1.5

    def test_garbage_raises_value_error(self, settings_manager):
        settings_manager.set('overlay.shape_count', "lots")
        with pytest.raises(ValueError):
            settings_manager.get_int('overlay.shape_count')

    def test_missing_key_returns_default(self, settings_manager):
        assert settings_manager.get('overlay.nonexistent', 'fallback') == 'fallback'

    def test_existing_values_survive_a_new_manager(self, settings_manager):
        from core.settings.settings_manager import SettingsManager

        settings_manager.set('overlay.shape_count', 7)
        reopened = SettingsManager(organization="Test", application="OverlayTest")
        assert reopened.get_int('overlay.shape_count') == 7


class TestClear:
    def test_clear_removes_stored_values(self, settings_manager):
        settings_manager.set('overlay.shape_count', 1)
        settings_manager.clear()
        assert settings_manager.get('overlay.shape_count', 'gone') == 'gone'
