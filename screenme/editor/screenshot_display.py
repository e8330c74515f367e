"""
Full-screen screenshot display for ScreenMe.

The display shows a captured screen and lets the user:
- Drag out a selection, then move it or resize it from its 8 handles
- Draw pen strokes, rectangles, ellipses, lines, arrows and text
- Undo (Ctrl+Z) / redo (Ctrl+Shift+Z) annotation changes
- Copy the annotated selection (Ctrl+C), save, or close (Escape)

Input routing:
- No tool active: pointer input drives the SelectionEngine
- Any tool active: pointer input drives the DrawingStateMachine

Repaints are requested with update() and composed by compositor.compose_frame().
"""

from typing import Optional

from PySide6.QtCore import QPoint, QRect, Qt, Signal, Slot
from PySide6.QtGui import (
    QColor,
    QCursor,
    QGuiApplication,
    QImage,
    QKeyEvent,
    QMouseEvent,
    QPainter,
    QWheelEvent,
)
from PySide6.QtWidgets import QApplication, QFileDialog, QWidget

from screenme.editor.compositor import compose_frame
from screenme.editor.drawing import DrawingStateMachine, ToolType
from screenme.editor.history import UndoStack
from screenme.editor.layers import AnnotationLayer, CapturedImage, composite
from screenme.editor.selection import HandlePosition, SelectionEngine
from screenme.editor.text_overlay import TextOverlayController
from screenme.services.config_service import ConfigService, normalize_extension
from screenme.services.file_utils import build_file_filter, get_unique_file_path
from screenme.services.logging_service import get_logger
from screenme.ui.editor_toolbar import EditorToolbar

DEFAULT_FILE_BASE_NAME = "screenshot"

# Gap between the selection's top-right corner and the toolbar
TOOLBAR_MARGIN = 10

HANDLE_CURSORS = {
    HandlePosition.TOP_LEFT: Qt.CursorShape.SizeFDiagCursor,
    HandlePosition.BOTTOM_RIGHT: Qt.CursorShape.SizeFDiagCursor,
    HandlePosition.TOP_RIGHT: Qt.CursorShape.SizeBDiagCursor,
    HandlePosition.BOTTOM_LEFT: Qt.CursorShape.SizeBDiagCursor,
    HandlePosition.TOP: Qt.CursorShape.SizeVerCursor,
    HandlePosition.BOTTOM: Qt.CursorShape.SizeVerCursor,
    HandlePosition.LEFT: Qt.CursorShape.SizeHorCursor,
    HandlePosition.RIGHT: Qt.CursorShape.SizeHorCursor,
    HandlePosition.MOVE: Qt.CursorShape.SizeAllCursor,
}


class ScreenshotDisplay(QWidget):
    """
    Frameless full-screen widget owning the captured image and its annotations.

    Signals:
        closed: Emitted once, when the display closes for any reason.
    """

    closed = Signal()

    def __init__(
        self,
        image: QImage,
        config_service: ConfigService,
        clipboard=None,
        parent: Optional[QWidget] = None,
    ) -> None:
        """
        Initialize the display.

        Args:
            image: The captured screen. A private copy is kept.
            config_service: Source of the save folder and file extension.
            clipboard: Object with setImage(QImage). Defaults to the
                application clipboard.
            parent: Optional parent widget.
        """
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._config = config_service
        self._clipboard = clipboard

        self._captured = CapturedImage(image)
        self._layer = AnnotationLayer(self._captured.size, self)
        self._history = UndoStack(self._layer, self)
        self._selection = SelectionEngine(self)
        self._text_overlay = TextOverlayController(self, self._layer, self._history, self)
        self._drawing = DrawingStateMachine(self._layer, self._history, self._text_overlay, self)
        self._toolbar = EditorToolbar(self)
        self._toolbar.hide()

        self._cursor_pos: Optional[QPoint] = None
        self._closed_emitted = False

        self._setup_window()
        self._connect_signals()

        self._logger.info(
            f"Screenshot display created: {self._captured.size.width()}x{self._captured.size.height()}"
        )

    def _setup_window(self) -> None:
        self.setWindowFlags(
            Qt.WindowType.Window
            | Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
        )
        self.setWindowTitle("ScreenMe")
        self.setAttribute(Qt.WidgetAttribute.WA_QuitOnClose, False)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.resize(self._captured.size)

    def _connect_signals(self) -> None:
        self._layer.changed.connect(self.update)
        self._selection.selection_changed.connect(self._on_selection_changed)
        self._drawing.preview_changed.connect(self.update)
        self._drawing.stroke_width_changed.connect(lambda width: self.update())

        self._toolbar.tool_changed.connect(self._on_tool_selected)
        self._toolbar.color_changed.connect(self._on_color_changed)
        self._toolbar.save_requested.connect(self.save_to_file)
        self._toolbar.copy_requested.connect(self.copy_selection_to_clipboard)
        self._toolbar.publish_requested.connect(self.publish)
        self._toolbar.close_requested.connect(self.close)

    def show_fullscreen(self) -> None:
        """Cover the primary screen and take keyboard focus."""
        screen = QGuiApplication.primaryScreen()
        if screen is not None:
            self.setGeometry(screen.geometry())
        self.showFullScreen()
        self.raise_()
        self.activateWindow()
        self.setFocus()

    # ─── State Access ─────────────────────────────────────────────────────

    @property
    def captured_image(self) -> CapturedImage:
        return self._captured

    @property
    def annotation_layer(self) -> AnnotationLayer:
        return self._layer

    @property
    def history(self) -> UndoStack:
        return self._history

    @property
    def selection(self) -> SelectionEngine:
        return self._selection

    @property
    def drawing(self) -> DrawingStateMachine:
        return self._drawing

    @property
    def text_overlay(self) -> TextOverlayController:
        return self._text_overlay

    @property
    def toolbar(self) -> EditorToolbar:
        return self._toolbar

    # ─── Pointer Input ────────────────────────────────────────────────────

    def pointer_pressed(self, pos: QPoint) -> None:
        if self._drawing.tool == ToolType.NONE:
            self._selection.press(pos)
        else:
            self._drawing.press(pos)
        self.update()

    def pointer_moved(self, pos: QPoint) -> None:
        self._cursor_pos = QPoint(pos)

        if self._selection.is_dragging:
            self._selection.drag(pos)
        elif self._drawing.is_active:
            self._drawing.move(pos)

        if self._drawing.tool == ToolType.NONE:
            hit = self._selection.hit_test(pos)
            self.setCursor(HANDLE_CURSORS.get(hit, Qt.CursorShape.ArrowCursor))

        # Brush circle and live preview follow the pointer
        self.update()

    def pointer_released(self, pos: QPoint) -> None:
        self._selection.release()
        self._drawing.release(pos)
        self.update()

    def scrolled(self, delta_y: int) -> bool:
        if self._drawing.scroll(delta_y):
            self.update()
            return True
        return False

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self.pointer_pressed(event.position().toPoint())

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        self.pointer_moved(event.position().toPoint())

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self.pointer_released(event.position().toPoint())

    def wheelEvent(self, event: QWheelEvent) -> None:
        self.scrolled(event.angleDelta().y())
        event.accept()

    # ─── Keyboard Input ───────────────────────────────────────────────────

    def keyPressEvent(self, event: QKeyEvent) -> None:
        key = event.key()
        modifiers = event.modifiers()

        if key == Qt.Key.Key_Escape:
            self.escape()
            return

        if modifiers & Qt.KeyboardModifier.ControlModifier:
            if key == Qt.Key.Key_Z:
                if modifiers & Qt.KeyboardModifier.ShiftModifier:
                    self._history.redo()
                else:
                    self._history.undo()
                return
            if key == Qt.Key.Key_C:
                self.copy_selection_to_clipboard()
                return

        super().keyPressEvent(event)

    def escape(self) -> None:
        """Finalize text, else drop the active tool, else close."""
        if self._drawing.tool == ToolType.NONE:
            self.close()
        elif not self._drawing.escape():
            self._toolbar.deselect_tools()

    # ─── Toolbar Events ───────────────────────────────────────────────────

    @Slot(object)
    def _on_tool_selected(self, tool: ToolType) -> None:
        self._drawing.set_tool(tool)
        self.setCursor(
            Qt.CursorShape.ArrowCursor if tool == ToolType.NONE else Qt.CursorShape.CrossCursor
        )
        self.update()

    @Slot(QColor)
    def _on_color_changed(self, color: QColor) -> None:
        self._drawing.set_color(color)
        self.update()

    @Slot(QRect)
    def _on_selection_changed(self, rect: QRect) -> None:
        if rect.isValid():
            self._place_toolbar(rect)
            if self._toolbar.isHidden():
                self._toolbar.show()
                self._toolbar.raise_()
        self.update()

    def _place_toolbar(self, rect: QRect) -> None:
        pos = QPoint(rect.x() + rect.width(), rect.y()) + QPoint(TOOLBAR_MARGIN, TOOLBAR_MARGIN)

        # Keep the toolbar on screen when the selection touches an edge
        max_x = max(0, self.width() - self._toolbar.width())
        max_y = max(0, self.height() - self._toolbar.height())
        pos.setX(min(pos.x(), max_x))
        pos.setY(min(pos.y(), max_y))
        self._toolbar.move(pos)

    # ─── Commit Operations ────────────────────────────────────────────────

    @Slot()
    def save_to_file(self) -> None:
        """
        Ask for a path and save the captured screenshot there.

        Only the original capture is written; annotations are not included.
        A cancelled dialog leaves the display open.
        """
        config = self._config.load_config()
        folder = config.get("default_save_folder", "")
        extension = normalize_extension(config.get("file_extension", "png"))

        default_path = get_unique_file_path(folder, DEFAULT_FILE_BASE_NAME, extension)
        file_filter = build_file_filter(extension)

        file_path, _ = QFileDialog.getSaveFileName(self, "Save As", default_path, file_filter)
        if not file_path:
            self._logger.debug("Save cancelled")
            return

        if self._captured.save(file_path):
            self._logger.info(f"Screenshot saved to {file_path}")
            self.close()
        else:
            self._logger.error(f"Failed to save screenshot to {file_path}")

    def render_result(self) -> QImage:
        """Screenshot with annotations, cropped to the selection if there is one."""
        region = self._selection.rect if self._selection.is_valid else None
        return composite(self._captured, self._layer, region)

    @Slot()
    def copy_selection_to_clipboard(self) -> None:
        # Typed text belongs in the copy
        self._text_overlay.finalize()

        result = self.render_result()
        clipboard = self._clipboard if self._clipboard is not None else QApplication.clipboard()
        clipboard.setImage(result)
        self._logger.info(f"Copied {result.width()}x{result.height()} image to clipboard")
        self.close()

    @Slot()
    def publish(self) -> None:
        self._logger.info("Publish requested; publishing is not available")

    # ─── Painting and Lifecycle ───────────────────────────────────────────

    def paintEvent(self, event) -> None:
        cursor_pos = self._cursor_pos
        if cursor_pos is None and self._drawing.tool != ToolType.NONE:
            cursor_pos = self.mapFromGlobal(QCursor.pos())

        painter = QPainter(self)
        compose_frame(
            painter,
            self._captured,
            self._layer,
            self._selection,
            self._drawing,
            cursor_pos,
        )
        painter.end()

    def closeEvent(self, event) -> None:
        self._text_overlay.finalize()
        self._toolbar.hide()
        self._history.clear()
        self._layer.clear()

        if not self._closed_emitted:
            self._closed_emitted = True
            self._logger.info("Screenshot display closed")
            self.closed.emit()

        super().closeEvent(event)


def open_display(image: QImage, config_service: ConfigService,
                 selection: Optional[QRect] = None) -> ScreenshotDisplay:
    """
    Create a display for image and show it full screen.

    Args:
        image: The captured screen.
        config_service: Configuration used when saving.
        selection: Optional initial selection rectangle.
    """
    display = ScreenshotDisplay(image, config_service)
    if selection is not None:
        display.selection.set_rect(selection)
    display.show_fullscreen()
    return display
