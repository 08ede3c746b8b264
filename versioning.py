"""Centralised version and naming information for the overlay.

This module is the single source of truth for the application name and
version; main.py and the settings store both read from here.
"""
from __future__ import annotations


APP_NAME: str = "RandomShapeOverlay"
APP_ORGANIZATION: str = "RandomShapeOverlay"
APP_VERSION: str = "1.0.0"
APP_DESCRIPTION: str = "Random Shape Overlay - random translucent shapes cross-faded over a background image on a fixed cadence."


__all__ = [
    "APP_NAME",
    "APP_ORGANIZATION",
    "APP_VERSION",
    "APP_DESCRIPTION",
]
