"""
Shared pytest fixtures for overlay tests.
"""
import os
import random
import sys

import pytest
from PySide6.QtWidgets import QApplication

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope='session')
def qt_app():
    """Create QApplication instance for tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app
    # Don't quit - causes issues with pytest


@pytest.fixture
def settings_manager(qt_app):
    """Create SettingsManager instance for testing."""
    from core.settings.settings_manager import SettingsManager
    manager = SettingsManager(organization="Test", application="OverlayTest")
    yield manager
    # Clear test settings
    manager.clear()


@pytest.fixture
def thread_manager():
    """Create ThreadManager instance for testing."""
    from core.threading.manager import ThreadManager
    manager = ThreadManager()
    yield manager
    manager.shutdown(wait=True)


@pytest.fixture
def event_system():
    """Create EventSystem instance for testing."""
    from core.events import EventSystem
    system = EventSystem()
    yield system
    system.clear()


@pytest.fixture
def animation_manager(qt_app):
    """AnimationManager stepped by hand through advance()."""
    from core.animation import AnimationManager
    manager = AnimationManager(fps=60)
    yield manager
    manager.cleanup()


@pytest.fixture
def geometry():
    """The 800x600 canvas with a 50-100 size range."""
    from engine.shapes import CanvasGeometry
    return CanvasGeometry(800, 600, 50, 100)


@pytest.fixture
def seeded_rng():
    return random.Random(1234)


@pytest.fixture
def temp_image(tmp_path):
    """Create a temporary 100x100 test image."""
    from PySide6.QtGui import QImage, QColor
    from PySide6.QtCore import QSize

    image = QImage(QSize(100, 100), QImage.Format.Format_RGB32)
    image.fill(QColor(255, 0, 0))  # Red

    image_path = tmp_path / "test_image.png"
    image.save(str(image_path))

    return image_path


class FakeThreadManager:
    """Stands in for ThreadManager: holds submitted work until complete() is called."""

    def __init__(self, fail_submit: bool = False):
        self.fail_submit = fail_submit
        self.submitted = []
        self.cancelled = []

    def submit_compute_task(self, func, *args, task_id=None, callback=None, **kwargs):
        if self.fail_submit:
            raise RuntimeError("Thread manager is shut down")
        self.submitted.append((task_id, func, args, kwargs, callback))
        return task_id

    def cancel_task(self, task_id):
        self.cancelled.append(task_id)
        return False

    @property
    def pending(self) -> int:
        return len(self.submitted)

    def complete(self, index: int = 0):
        """Run the queued task inline and deliver its TaskResult to the callback."""
        from core.threading.manager import TaskResult
        task_id, func, args, kwargs, callback = self.submitted.pop(index)
        try:
            result = TaskResult(success=True, result=func(*args, **kwargs), task_id=task_id)
        except Exception as e:
            result = TaskResult(success=False, error=e, task_id=task_id)
        callback(result)
        return result

    def fail(self, error: BaseException, index: int = 0):
        from core.threading.manager import TaskResult
        task_id, _func, _args, _kwargs, callback = self.submitted.pop(index)
        result = TaskResult(success=False, error=error, task_id=task_id)
        callback(result)
        return result


@pytest.fixture
def fake_threads():
    return FakeThreadManager()


@pytest.fixture
def make_fake_threads():
    return FakeThreadManager
