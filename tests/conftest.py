"""
Shared pytest fixtures.

Qt runs on the offscreen platform so the suite works without a display.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QImage
from PySide6.QtWidgets import QApplication, QWidget

from screenme.editor.history import UndoStack
from screenme.editor.layers import AnnotationLayer
from screenme.editor.screenshot_display import ScreenshotDisplay
from screenme.services.config_service import ConfigService


class FakeClipboard:
    """Records images instead of touching the system clipboard."""

    def __init__(self):
        self.images = []

    def setImage(self, image):
        self.images.append(QImage(image))

    @property
    def last_image(self):
        return self.images[-1] if self.images else None


def make_image(width=200, height=100, color=Qt.GlobalColor.white):
    image = QImage(width, height, QImage.Format.Format_RGB32)
    image.fill(QColor(color))
    return image


@pytest.fixture(scope="session")
def qapp():
    """Single QApplication for the whole test session."""
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def config_service(tmp_path):
    """ConfigService backed by a temp file, saving into a temp folder."""
    service = ConfigService(config_path=tmp_path / "config" / "config.json")
    service.set("default_save_folder", str(tmp_path / "shots"))
    return service


@pytest.fixture
def layer(qapp):
    return AnnotationLayer(make_image().size())


@pytest.fixture
def history(layer):
    return UndoStack(layer)


@pytest.fixture
def host_widget(qapp):
    widget = QWidget()
    widget.resize(200, 100)
    yield widget
    widget.deleteLater()


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def display(qapp, config_service, clipboard):
    """A shown 200x100 display on a white capture."""
    widget = ScreenshotDisplay(make_image(), config_service, clipboard=clipboard)
    widget.show()
    yield widget
    widget.close()
    widget.deleteLater()
    qapp.processEvents()
