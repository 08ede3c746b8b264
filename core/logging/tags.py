"""Standard logging tags for consistent log filtering.

Usage:
    from core.logging.tags import TAG_SCHED
    logger.info("%s Tick skipped", TAG_SCHED)
"""

TAG_PERF = "[PERF]"
"""Generation timing and other performance measurements."""

TAG_ENGINE = "[ENGINE]"
"""Driver lifecycle and state changes."""

TAG_SCHED = "[SCHED]"
"""Generation scheduler ticks and state transitions."""

TAG_SKIP = "[SKIP]"
"""Ticks observed while a generation is still running."""

TAG_GEN = "[GEN]"
"""Batch generation on the worker pool."""

TAG_FADE = "[FADE]"
"""Compositor fade transitions."""

TAG_THREADING = "[THREADING]"
"""Thread pool operations."""

TAG_IMAGE = "[IMAGE]"
"""Background image loading."""
