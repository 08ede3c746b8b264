"""Exception hierarchy for the overlay engine."""


class OverlayError(Exception):
    """Base class for overlay errors."""


class ConfigurationError(OverlayError, ValueError):
    """Invalid canvas bounds or settings. Fatal at construction time."""


class GenerationError(OverlayError):
    """A batch could not be produced. Recovered per cycle by the scheduler."""


class GenerationCancelled(GenerationError):
    """A batch was abandoned because the scheduler was stopped."""


class BackgroundLoadError(OverlayError):
    """The background image could not be loaded."""
