"""
Text overlay for the screenshot display.

While the text tool is active, the first click opens an editable field at
the click point. The field is a transparent, frameless QTextEdit that
widens as the user types. The second click (or Escape, or closing the
display) finalizes the session: the typed lines are rasterized into the
annotation layer at the same place and the field is destroyed.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from PySide6.QtCore import QObject, QPoint, Qt, Signal
from PySide6.QtGui import QColor, QFont, QFontMetrics, QPainter, QPen
from PySide6.QtWidgets import QFrame, QTextEdit, QWidget

from screenme.editor.history import UndoStack
from screenme.editor.layers import AnnotationLayer
from screenme.services.logging_service import get_logger

DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_POINT_SIZE = 16

# Added to the measured text width so the caret never wraps
TEXT_PADDING = 10


def text_baselines(anchor: QPoint, lines: List[str],
                   metrics: QFontMetrics) -> List[Tuple[QPoint, str]]:
    """
    Baseline origin of every line when text is drawn from anchor.

    The first baseline sits one ascent below the anchor; each following
    line is one font height lower.
    """
    baselines = []
    y = anchor.y() + metrics.ascent()
    for line in lines:
        baselines.append((QPoint(anchor.x(), y), line))
        y += metrics.height()
    return baselines


@dataclass
class TextEditSession:
    """The single open text field and where it was anchored."""
    anchor: QPoint
    editor: QTextEdit


class TextOverlayController(QObject):
    """
    Owns the lifecycle of the transient text field.

    Signals:
        session_opened: Emitted with the anchor point of a new session.
        session_closed: Emitted after a session is finalized.
    """

    session_opened = Signal(QPoint)
    session_closed = Signal()

    def __init__(
        self,
        host: QWidget,
        layer: AnnotationLayer,
        history: UndoStack,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._host = host
        self._layer = layer
        self._history = history

        self._font = QFont(DEFAULT_FONT_FAMILY, DEFAULT_POINT_SIZE)
        self._color = QColor(Qt.GlobalColor.black)
        self._session: Optional[TextEditSession] = None

    @property
    def is_open(self) -> bool:
        return self._session is not None

    @property
    def editor(self) -> Optional[QTextEdit]:
        return self._session.editor if self._session else None

    @property
    def text(self) -> str:
        return self._session.editor.toPlainText() if self._session else ""

    @property
    def font(self) -> QFont:
        return QFont(self._font)

    def set_color(self, color: QColor) -> None:
        self._color = QColor(color)
        if self._session:
            self._session.editor.setTextColor(self._color)

    def open(self, point: QPoint) -> bool:
        """
        Open a text field anchored at point.

        Returns:
            False if a session is already open.
        """
        if self._session is not None:
            return False

        editor = QTextEdit(self._host)
        editor.setFont(self._font)
        editor.setTextColor(self._color)
        editor.setStyleSheet("background: transparent;")
        editor.setFrameStyle(QFrame.Shape.NoFrame)
        editor.document().setDocumentMargin(0)
        editor.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        editor.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        editor.setLineWrapMode(QTextEdit.LineWrapMode.NoWrap)
        editor.move(point)

        self._session = TextEditSession(anchor=QPoint(point), editor=editor)
        editor.textChanged.connect(self._fit_to_content)
        self._fit_to_content()

        editor.show()
        editor.setFocus()

        self._logger.debug(f"Text session opened at ({point.x()}, {point.y()})")
        self.session_opened.emit(QPoint(point))
        return True

    def finalize(self) -> bool:
        """
        Commit the typed text into the annotation layer and close the field.

        Safe to call with no open session.

        Returns:
            True if text was written to the layer.
        """
        session = self._session
        if session is None:
            return False

        # Clear first so re-entrant calls (e.g. from close) are no-ops
        self._session = None

        text = session.editor.toPlainText()
        font = QFont(session.editor.font())
        committed = False

        if text:
            color = QColor(self._color)
            baselines = text_baselines(session.anchor, text.split("\n"), QFontMetrics(font))

            def paint_text(painter: QPainter) -> None:
                painter.setFont(font)
                painter.setPen(QPen(color))
                for origin, line in baselines:
                    painter.drawText(origin, line)

            self._history.push("Text")
            self._layer.commit(paint_text)
            committed = True
            self._logger.debug(f"Text committed at ({session.anchor.x()}, {session.anchor.y()})")

        self._destroy_editor(session.editor)
        self.session_closed.emit()
        return committed

    def change_font_size(self, steps: int) -> bool:
        """Grow or shrink the font by steps points; sizes stay positive."""
        new_size = self._font.pointSize() + steps
        if new_size <= 0:
            return False

        self._font.setPointSize(new_size)
        if self._session:
            self._session.editor.setFont(self._font)
            self._fit_to_content()
        return True

    def _fit_to_content(self) -> None:
        if not self._session:
            return

        editor = self._session.editor
        text = editor.toPlainText()
        metrics = QFontMetrics(editor.font())

        width = metrics.horizontalAdvance(text.replace("\n", " ")) + TEXT_PADDING
        height = metrics.height() * (text.count("\n") + 1) + TEXT_PADDING
        editor.setFixedSize(width, height)

    def _destroy_editor(self, editor: QTextEdit) -> None:
        editor.hide()
        editor.setParent(None)
        editor.deleteLater()
