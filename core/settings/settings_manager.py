"""
Settings manager implementation for the shape overlay.

Uses QSettings for persistent storage with dotted keys ('overlay.shape_count').
"""
from typing import Any, Dict
import threading
from PySide6.QtCore import QSettings
from core.constants.timing import (
    DEFAULT_SHAPE_COUNT,
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_FADE_SECONDS,
    DEFAULT_FADE_EASING,
)
from core.logging.logger import get_logger, is_verbose_logging
from versioning import APP_NAME, APP_ORGANIZATION

logger = get_logger('SettingsManager')

DEFAULT_BACKGROUND = "https://farm9.staticflickr.com/8205/8264285440_f5617efb71_b.jpg"

DEFAULTS: Dict[str, Any] = {
    'overlay.shape_count': DEFAULT_SHAPE_COUNT,
    'overlay.interval_seconds': DEFAULT_INTERVAL_SECONDS,
    'overlay.fade_seconds': DEFAULT_FADE_SECONDS,
    'overlay.fade_easing': DEFAULT_FADE_EASING,
    'overlay.background': DEFAULT_BACKGROUND,
    # Empty string means "seed from system entropy".
    'overlay.seed': '',
}


class SettingsManager:
    """
    Centralized settings management for the overlay.

    Thread-safe. QSettings hands numbers back as strings on some backends,
    so callers should prefer get_int/get_float.
    """

    def __init__(self, organization: str = APP_ORGANIZATION,
                 application: str = APP_NAME):
        self._settings = QSettings(organization, application)
        self._lock = threading.RLock()

        self._set_defaults()
        logger.info("SettingsManager initialized")

    def _set_defaults(self) -> None:
        """Set default values if not already present."""
        with self._lock:
            for key, value in DEFAULTS.items():
                if not self._settings.contains(key):
                    self._settings.setValue(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value in dot notation, or ``default``."""
        with self._lock:
            return self._settings.value(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        """Get a setting normalised to int; raises ValueError on garbage."""
        raw = self.get(key, default)
        if isinstance(raw, bool):
            return int(raw)
        return int(float(raw))

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get a setting normalised to float; raises ValueError on garbage."""
        return float(self.get(key, default))

    def set(self, key: str, value: Any) -> None:
        """
        Set a setting value.

        Args:
            key: Setting key in dot notation
            value: Value to set
        """
        with self._lock:
            old_value = self._settings.value(key)
            self._settings.setValue(key, value)

        if is_verbose_logging():
            logger.debug("Setting changed: %s: %r -> %r", key, old_value, value)
        else:
            logger.debug("Setting changed: %s", key)

    def clear(self) -> None:
        """Clear all settings (use with caution)."""
        with self._lock:
            self._settings.clear()
        logger.warning("All settings cleared")
