"""
Tests for the screenshot display: input routing, copy, save and close.
"""

from pathlib import Path

from PySide6.QtCore import QPoint, QRect, QSize, Qt
from PySide6.QtGui import QColor, QImage

from screenme.editor import screenshot_display
from screenme.editor.drawing import ToolType
from screenme.editor.screenshot_display import ScreenshotDisplay, open_display
from screenme.ui import editor_toolbar
from tests.conftest import make_image


class FakeSaveDialog:
    """Stands in for QFileDialog; returns a canned path."""

    def __init__(self, path=""):
        self.path = path
        self.calls = []

    def getSaveFileName(self, parent, caption, directory, file_filter):
        self.calls.append((caption, directory, file_filter))
        return self.path, file_filter


def record_closed(display):
    seen = []
    display.closed.connect(lambda: seen.append(True))
    return seen


def test_drag_without_tool_selects(display):
    display.pointer_pressed(QPoint(10, 10))
    display.pointer_moved(QPoint(60, 40))
    display.pointer_released(QPoint(60, 40))

    assert display.selection.rect == QRect(10, 10, 50, 30)
    assert display.toolbar.isVisible()


def test_toolbar_tool_routes_pointer_to_drawing(display):
    display.selection.set_rect(QRect(10, 10, 50, 30))
    display.toolbar.select_tool(ToolType.PEN)
    assert display.drawing.tool == ToolType.PEN

    display.pointer_pressed(QPoint(100, 50))
    display.pointer_moved(QPoint(150, 60))
    display.pointer_released(QPoint(150, 60))

    # Selection untouched, stroke recorded
    assert display.selection.rect == QRect(10, 10, 50, 30)
    assert display.history.depth == 1
    assert not display.annotation_layer.is_blank()


def test_clicking_active_tool_again_deselects(display):
    display.toolbar.select_tool(ToolType.ARROW)
    display.toolbar._on_tool_clicked(ToolType.ARROW, False)

    assert display.toolbar.current_tool == ToolType.NONE
    assert display.drawing.tool == ToolType.NONE


def test_scroll_adjusts_stroke_width(display):
    display.toolbar.select_tool(ToolType.PEN)
    width = display.drawing.stroke_width

    assert display.scrolled(120)
    assert display.drawing.stroke_width == width + 1


def test_copy_crops_to_selection(display, clipboard):
    closed = record_closed(display)
    display.selection.set_rect(QRect(10, 10, 50, 30))
    display.annotation_layer.commit(
        lambda painter: painter.fillRect(QRect(20, 20, 5, 5), QColor(Qt.GlobalColor.red))
    )

    display.copy_selection_to_clipboard()

    image = clipboard.last_image
    assert image.size() == QSize(50, 30)
    assert image.pixelColor(10, 10) == QColor(Qt.GlobalColor.red)
    assert image.pixelColor(0, 0) == QColor(Qt.GlobalColor.white)
    assert closed == [True]


def test_copy_without_selection_copies_everything(display, clipboard):
    display.copy_selection_to_clipboard()

    assert clipboard.last_image.size() == QSize(200, 100)


def test_copy_includes_open_text(display, clipboard):
    display.toolbar.select_tool(ToolType.TEXT)
    display.pointer_pressed(QPoint(20, 20))
    display.text_overlay.editor.setPlainText("hello")

    display.copy_selection_to_clipboard()

    assert not display.text_overlay.is_open
    assert display.history.depth == 0  # cleared on close
    assert clipboard.last_image is not None


def test_save_cancel_is_a_noop(display, monkeypatch):
    dialog = FakeSaveDialog("")
    monkeypatch.setattr(screenshot_display, "QFileDialog", dialog)
    closed = record_closed(display)

    display.save_to_file()

    assert closed == []
    assert display.isVisible()
    caption, directory, file_filter = dialog.calls[0]
    assert caption == "Save As"
    assert directory.endswith("screenshot.png")
    assert file_filter == "PNG Files (*.png);;"


def test_save_writes_original_capture_and_closes(display, monkeypatch, tmp_path):
    target = tmp_path / "out.png"
    monkeypatch.setattr(screenshot_display, "QFileDialog", FakeSaveDialog(str(target)))
    closed = record_closed(display)

    display.annotation_layer.commit(
        lambda painter: painter.fillRect(QRect(0, 0, 10, 10), QColor(Qt.GlobalColor.red))
    )
    display.save_to_file()

    saved = QImage(str(target))
    assert saved.size() == QSize(200, 100)
    # Annotations are not part of the saved file
    assert saved.pixelColor(5, 5) == QColor(Qt.GlobalColor.white)
    assert closed == [True]


def test_save_suggests_unique_name(display, monkeypatch, config_service):
    folder = Path(config_service.default_save_folder)
    folder.mkdir(parents=True)
    (folder / "screenshot.png").write_bytes(b"")
    dialog = FakeSaveDialog("")
    monkeypatch.setattr(screenshot_display, "QFileDialog", dialog)

    display.save_to_file()

    assert dialog.calls[0][1] == str(folder / "screenshot_1.png")


def test_escape_deselects_tool_before_closing(display):
    closed = record_closed(display)
    display.toolbar.select_tool(ToolType.RECTANGLE)

    display.escape()
    assert display.drawing.tool == ToolType.NONE
    assert closed == []

    display.escape()
    assert closed == [True]


def test_escape_finalizes_text_first(display):
    closed = record_closed(display)
    display.toolbar.select_tool(ToolType.TEXT)
    display.pointer_pressed(QPoint(30, 30))
    display.text_overlay.editor.setPlainText("x")

    display.escape()

    assert not display.text_overlay.is_open
    assert display.drawing.tool == ToolType.TEXT
    assert display.history.depth == 1
    assert closed == []


def test_closed_is_emitted_once(display):
    closed = record_closed(display)

    display.close()
    display.close()

    assert closed == [True]


def test_publish_keeps_display_open(display):
    closed = record_closed(display)
    display.publish()

    assert closed == []


def test_open_display_presets_selection(qapp, config_service):
    display = open_display(make_image(), config_service, selection=QRect(0, 0, 200, 100))
    try:
        assert display.isVisible()
        assert display.selection.rect == QRect(0, 0, 200, 100)
        assert display.toolbar.isVisible()
    finally:
        display.close()
        display.deleteLater()


def test_display_keeps_private_copy_of_capture(qapp, config_service):
    image = make_image()
    display = ScreenshotDisplay(image, config_service)
    image.fill(QColor(Qt.GlobalColor.black))

    assert display.captured_image.image.pixelColor(0, 0) == QColor(Qt.GlobalColor.white)
    display.deleteLater()


def test_close_discards_annotations(display):
    display.toolbar.select_tool(ToolType.LINE)
    display.pointer_pressed(QPoint(10, 10))
    display.pointer_released(QPoint(90, 90))
    assert display.history.depth == 1

    display.close()

    assert display.history.depth == 0
    assert display.annotation_layer.is_blank()


def test_save_normalizes_configured_extension(display, monkeypatch, config_service):
    config_service.set("file_extension", ".JPG")
    dialog = FakeSaveDialog("")
    monkeypatch.setattr(screenshot_display, "QFileDialog", dialog)

    display.save_to_file()

    _, directory, file_filter = dialog.calls[0]
    assert directory.endswith("screenshot.jpg")
    assert file_filter == "JPEG Files (*.jpg *.jpeg);;"


def test_picked_color_reaches_drawing(display, monkeypatch):
    class FakeColorDialog:
        @staticmethod
        def getColor(initial, parent, title):
            return QColor(Qt.GlobalColor.blue)

    monkeypatch.setattr(editor_toolbar, "QColorDialog", FakeColorDialog)

    display.toolbar._color_button.click()

    assert display.drawing.color == QColor(Qt.GlobalColor.blue)
