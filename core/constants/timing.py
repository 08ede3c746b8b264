"""Timing and sizing constants for the shape overlay.

Time values are in seconds unless the name ends in ``_MS``.
"""

# =============================================================================
# Generation Cycle
# =============================================================================

DEFAULT_SHAPE_COUNT = 1000
"""Shapes generated per batch."""

DEFAULT_INTERVAL_SECONDS = 3.0
"""Period of the generation timer."""

DEFAULT_FADE_SECONDS = 0.0
"""Duration of each half of the fade cycle. Zero disables fading."""

DEFAULT_FADE_EASING = "linear"
"""Name of the easing curve applied to both halves of the fade."""

# =============================================================================
# Fade Cycle
# =============================================================================

FADE_HIGH_OPACITY = 1.0
"""Layer opacity when fully visible."""

FADE_LOW_OPACITY = 0.4
"""Layer opacity at the bottom of the fade-out, where contents are swapped."""

ANIMATION_FPS = 60
"""Frame rate of the animation timer that drives fades."""

# =============================================================================
# Shape Geometry
# =============================================================================

MAX_SIZE_DIVISOR = 8
"""Largest shape size is the background width divided by this."""

MIN_SIZE_RATIO = 0.5
"""Smallest shape size as a fraction of the largest."""

STROKE_WIDTH_DIVISOR = 10
"""Stroke width is the larger bounding dimension divided by this."""

DESATURATE_FACTOR = 0.7
"""Saturation multiplier used to derive the stroke colour from the fill."""

MIN_FILL_ALPHA = 0.1
"""Lower bound of the fill alpha draw; the upper bound is exclusive 1.0."""

# =============================================================================
# Background Loading
# =============================================================================

BACKGROUND_DOWNLOAD_TIMEOUT = 15.0
"""HTTP timeout when the background image is a URL."""
