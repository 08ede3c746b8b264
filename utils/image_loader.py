"""Background image loading.

The background may be a local path, a ``file:`` URL or an ``http(s):`` URL.
Remote images are fetched with requests and decoded by Qt.
"""
from __future__ import annotations

from pathlib import Path

import requests
from PySide6.QtCore import QUrl
from PySide6.QtGui import QImage

from core.constants.timing import BACKGROUND_DOWNLOAD_TIMEOUT
from core.logging.logger import get_logger
from core.logging.tags import TAG_IMAGE
from engine.errors import BackgroundLoadError

logger = get_logger(__name__)

_USER_AGENT = "RandomShapeOverlay/1.0 (+background loader)"


class ImageLoader:
    """Unified background loading interface."""

    @staticmethod
    def load_background(location: str, timeout: float = BACKGROUND_DOWNLOAD_TIMEOUT) -> QImage:
        """Load the background image.

        Raises:
            BackgroundLoadError: if the location cannot be read or decoded
        """
        if not location:
            raise BackgroundLoadError("No background image location configured")

        if location.lower().startswith(("http:", "https:")):
            image = ImageLoader._download(location, timeout)
        else:
            path = QUrl(location).toLocalFile() if location.lower().startswith("file:") else location
            if not Path(path).is_file():
                raise BackgroundLoadError(f"Background image not found: {path}")
            image = QImage(str(path))

        if image.isNull():
            raise BackgroundLoadError(f"Could not decode background image: {location}")

        logger.info("%s Background loaded: %s (%dx%d)", TAG_IMAGE, location, image.width(), image.height())
        return image

    @staticmethod
    def _download(url: str, timeout: float) -> QImage:
        logger.debug("%s Downloading background %s", TAG_IMAGE, url)
        try:
            response = requests.get(url, timeout=timeout, headers={'User-Agent': _USER_AGENT})
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("%s Download failed for %s: %s", TAG_IMAGE, url, e)
            raise BackgroundLoadError(f"Could not download background {url}: {e}") from e
        image = QImage()
        image.loadFromData(response.content)
        return image
