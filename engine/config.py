"""Runtime configuration of the generation cycle."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional

from core.animation.types import EasingCurve
from core.constants.timing import (
    DEFAULT_FADE_EASING,
    DEFAULT_FADE_SECONDS,
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_SHAPE_COUNT,
)
from core.logging.logger import get_logger
from engine.errors import ConfigurationError

logger = get_logger(__name__)


@dataclass(frozen=True)
class OverlayConfig:
    shape_count: int = DEFAULT_SHAPE_COUNT
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    fade_seconds: float = DEFAULT_FADE_SECONDS
    seed: Optional[int] = None
    fade_easing: EasingCurve = EasingCurve(DEFAULT_FADE_EASING)

    def __post_init__(self):
        if isinstance(self.shape_count, bool) or not isinstance(self.shape_count, int) \
                or self.shape_count < 0:
            raise ConfigurationError(f"shape_count must be a non-negative int, got {self.shape_count!r}")
        if not _finite(self.interval_seconds) or self.interval_seconds <= 0:
            raise ConfigurationError(f"interval_seconds must be positive, got {self.interval_seconds!r}")
        if not _finite(self.fade_seconds) or self.fade_seconds < 0:
            raise ConfigurationError(f"fade_seconds must not be negative, got {self.fade_seconds!r}")
        if not isinstance(self.fade_easing, EasingCurve):
            raise ConfigurationError(f"fade_easing must be an EasingCurve, got {self.fade_easing!r}")

    @property
    def interval_ms(self) -> int:
        return max(1, int(round(self.interval_seconds * 1000)))

    @property
    def fading_enabled(self) -> bool:
        return self.fade_seconds > 0

    def with_overrides(self, **overrides) -> "OverlayConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_settings(cls, settings) -> "OverlayConfig":
        """Build a config from a SettingsManager.

        Raises:
            ConfigurationError: if a stored value cannot be interpreted
        """
        try:
            raw_seed = settings.get('overlay.seed', '')
            seed = int(raw_seed) if raw_seed not in (None, '') else None
            config = cls(
                shape_count=settings.get_int('overlay.shape_count', DEFAULT_SHAPE_COUNT),
                interval_seconds=settings.get_float('overlay.interval_seconds', DEFAULT_INTERVAL_SECONDS),
                fade_seconds=settings.get_float('overlay.fade_seconds', DEFAULT_FADE_SECONDS),
                seed=seed,
                fade_easing=EasingCurve(settings.get('overlay.fade_easing', DEFAULT_FADE_EASING)),
            )
        except (TypeError, ValueError) as e:
            if isinstance(e, ConfigurationError):
                raise
            raise ConfigurationError(f"Invalid overlay settings: {e}") from e
        logger.debug("Loaded %s", config)
        return config


def _finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
