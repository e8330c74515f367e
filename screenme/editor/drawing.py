"""
Drawing tools and the drawing state machine.

Tools:
- PEN: freehand strokes painted straight into the annotation layer
- RECTANGLE, ELLIPSE, LINE, ARROW: previewed while dragging, committed
  on release
- TEXT: handled by the text overlay controller
- NONE: no drawing; pointer input goes to the selection engine

Every shape tool has one paint function in SHAPE_PAINTERS; the same
function draws the live preview and the committed shape.
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

from PySide6.QtCore import QObject, QPoint, QPointF, QRect, Qt, Signal
from PySide6.QtGui import QBrush, QColor, QPainter, QPen, QPolygonF

from screenme.editor.history import UndoStack
from screenme.editor.layers import AnnotationLayer
from screenme.editor.selection import rect_from_points
from screenme.services.logging_service import get_logger

if TYPE_CHECKING:
    from screenme.editor.text_overlay import TextOverlayController


class ToolType(Enum):
    """The active editor tool. Exactly one is active at a time."""
    NONE = auto()
    PEN = auto()
    RECTANGLE = auto()
    ELLIPSE = auto()
    LINE = auto()
    ARROW = auto()
    TEXT = auto()


class DrawState(Enum):
    IDLE = auto()
    DRAWING = auto()
    SHAPE_DRAWING = auto()


DEFAULT_STROKE_WIDTH = 5
MIN_STROKE_WIDTH = 1
MAX_STROKE_WIDTH = 20

# One notch of a standard mouse wheel
WHEEL_STEP = 120

ARROW_HEAD_ANGLE = math.pi / 6


def wheel_steps(delta_y: int) -> int:
    """Whole wheel notches in delta_y, truncated toward zero."""
    return int(delta_y / WHEEL_STEP)


def make_pen(color: QColor, width: int) -> QPen:
    return QPen(
        color, width,
        Qt.PenStyle.SolidLine,
        Qt.PenCapStyle.RoundCap,
        Qt.PenJoinStyle.RoundJoin,
    )


def arrow_head_points(start: QPointF, end: QPointF, stroke_width: int) -> Tuple[QPointF, QPointF]:
    """
    Wing points of the arrowhead drawn at end.

    The wings sit 2x stroke_width away from the tip, rotated +/-30 degrees
    from the direction pointing back along the line.
    """
    angle = math.atan2(start.y() - end.y(), start.x() - end.x())
    length = stroke_width * 2

    wing1 = QPointF(
        end.x() + math.cos(angle + ARROW_HEAD_ANGLE) * length,
        end.y() + math.sin(angle + ARROW_HEAD_ANGLE) * length,
    )
    wing2 = QPointF(
        end.x() + math.cos(angle - ARROW_HEAD_ANGLE) * length,
        end.y() + math.sin(angle - ARROW_HEAD_ANGLE) * length,
    )
    return wing1, wing2


# ─── Shape Painters ───────────────────────────────────────────────────────────

def _paint_rectangle(painter: QPainter, anchor: QPoint, end: QPoint,
                     color: QColor, stroke_width: int) -> None:
    painter.drawRect(rect_from_points(anchor, end))


def _paint_ellipse(painter: QPainter, anchor: QPoint, end: QPoint,
                   color: QColor, stroke_width: int) -> None:
    painter.drawEllipse(rect_from_points(anchor, end))


def _paint_line(painter: QPainter, anchor: QPoint, end: QPoint,
                color: QColor, stroke_width: int) -> None:
    painter.drawLine(anchor, end)


def _paint_arrow(painter: QPainter, anchor: QPoint, end: QPoint,
                 color: QColor, stroke_width: int) -> None:
    start_f = QPointF(anchor)
    end_f = QPointF(end)
    painter.drawLine(start_f, end_f)

    wing1, wing2 = arrow_head_points(start_f, end_f, stroke_width)
    painter.setBrush(QBrush(color))
    painter.drawPolygon(QPolygonF([end_f, wing1, wing2]))


ShapePainter = Callable[[QPainter, QPoint, QPoint, QColor, int], None]

SHAPE_PAINTERS: Dict[ToolType, ShapePainter] = {
    ToolType.RECTANGLE: _paint_rectangle,
    ToolType.ELLIPSE: _paint_ellipse,
    ToolType.LINE: _paint_line,
    ToolType.ARROW: _paint_arrow,
}


def paint_shape(painter: QPainter, tool: ToolType, anchor: QPoint, end: QPoint,
                color: QColor, stroke_width: int) -> None:
    """Paint one shape with the tool's painter function."""
    try:
        shape_painter = SHAPE_PAINTERS[tool]
    except KeyError:
        raise ValueError(f"Tool {tool.name} does not draw shapes") from None

    painter.setPen(make_pen(color, stroke_width))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    shape_painter(painter, anchor, end, color, stroke_width)


@dataclass
class ShapePreview:
    """In-progress shape geometry, read by the render pipeline."""
    tool: ToolType
    anchor: QPoint
    end: QPoint
    color: QColor
    stroke_width: int

    @property
    def bounding_rect(self) -> QRect:
        return rect_from_points(self.anchor, self.end)


# ─── State Machine ────────────────────────────────────────────────────────────

class DrawingStateMachine(QObject):
    """
    Turns pointer gestures into strokes and shapes on the annotation layer.

    Pen strokes are written incrementally on every move; shapes are only
    previewed until release. One undo snapshot is pushed per gesture,
    right before its first write.

    Signals:
        preview_changed: Emitted when the in-progress shape changes.
        stroke_width_changed: Emitted with the new width after a scroll.
    """

    preview_changed = Signal()
    stroke_width_changed = Signal(int)

    def __init__(
        self,
        layer: AnnotationLayer,
        history: UndoStack,
        text_overlay: Optional["TextOverlayController"] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._layer = layer
        self._history = history
        self._text_overlay = text_overlay

        self._tool = ToolType.NONE
        self._color = QColor(Qt.GlobalColor.black)
        self._stroke_width = DEFAULT_STROKE_WIDTH

        self._state = DrawState.IDLE
        self._anchor: Optional[QPoint] = None
        self._last_point: Optional[QPoint] = None
        self._current_point: Optional[QPoint] = None

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def tool(self) -> ToolType:
        return self._tool

    @property
    def color(self) -> QColor:
        return QColor(self._color)

    @property
    def stroke_width(self) -> int:
        return self._stroke_width

    @property
    def state(self) -> DrawState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state != DrawState.IDLE

    @property
    def preview(self) -> Optional[ShapePreview]:
        """The shape being dragged, or None outside a shape gesture."""
        if self._state != DrawState.SHAPE_DRAWING:
            return None
        return ShapePreview(
            tool=self._tool,
            anchor=QPoint(self._anchor),
            end=QPoint(self._current_point),
            color=QColor(self._color),
            stroke_width=self._stroke_width,
        )

    # ─── Tool Events ──────────────────────────────────────────────────────

    def set_tool(self, tool: ToolType) -> None:
        if tool == self._tool:
            return

        # Leaving the text tool commits whatever was typed
        if self._tool == ToolType.TEXT and self._text_overlay:
            self._text_overlay.finalize()

        self._reset_gesture()
        self._tool = tool
        self._logger.debug(f"Tool changed to {tool.name}")
        self.preview_changed.emit()

    def set_color(self, color: QColor) -> None:
        self._color = QColor(color)
        if self._text_overlay:
            self._text_overlay.set_color(self._color)
        self.preview_changed.emit()

    def set_stroke_width(self, width: int) -> None:
        self._stroke_width = max(MIN_STROKE_WIDTH, min(MAX_STROKE_WIDTH, width))
        self.stroke_width_changed.emit(self._stroke_width)

    # ─── Pointer Events ───────────────────────────────────────────────────

    def press(self, point: QPoint) -> bool:
        """
        Start a gesture at point.

        Returns:
            True if the active tool consumed the press.
        """
        if self._tool == ToolType.NONE:
            return False

        if self._tool == ToolType.TEXT:
            if self._text_overlay is None:
                return False
            if self._text_overlay.is_open:
                self._text_overlay.finalize()
            else:
                self._text_overlay.open(point)
            return True

        if self._tool == ToolType.PEN:
            self._history.push("Pen stroke")
            self._state = DrawState.DRAWING
            self._last_point = QPoint(point)
            return True

        self._state = DrawState.SHAPE_DRAWING
        self._anchor = QPoint(point)
        self._current_point = QPoint(point)
        self.preview_changed.emit()
        return True

    def move(self, point: QPoint) -> None:
        if self._state == DrawState.DRAWING and self._last_point is not None:
            start = QPoint(self._last_point)
            pen = make_pen(self._color, self._stroke_width)

            def paint_segment(painter: QPainter) -> None:
                painter.setPen(pen)
                painter.drawLine(start, point)

            self._layer.commit(paint_segment)
            self._last_point = QPoint(point)

        elif self._state == DrawState.SHAPE_DRAWING:
            self._current_point = QPoint(point)
            self.preview_changed.emit()

    def release(self, point: QPoint) -> None:
        if self._state == DrawState.SHAPE_DRAWING:
            self._current_point = QPoint(point)
            self._commit_shape()

        self._reset_gesture()

    def escape(self) -> bool:
        """Finalize an open text session. Returns True if one was open."""
        if self._tool == ToolType.TEXT and self._text_overlay and self._text_overlay.is_open:
            self._text_overlay.finalize()
            return True
        return False

    def scroll(self, delta_y: int) -> bool:
        """
        Apply a wheel delta to the stroke width or the text font size.

        Returns:
            True if the scroll changed something.
        """
        steps = wheel_steps(delta_y)
        if steps == 0:
            return False

        if self._tool == ToolType.TEXT:
            if self._text_overlay and self._text_overlay.is_open:
                return self._text_overlay.change_font_size(steps)
            return False

        if self._tool == ToolType.NONE:
            return False

        old_width = self._stroke_width
        self.set_stroke_width(self._stroke_width + steps)
        return self._stroke_width != old_width

    # ─── Internals ────────────────────────────────────────────────────────

    def _commit_shape(self) -> None:
        anchor = self._anchor
        end = self._current_point
        if anchor is None or end is None:
            return

        if anchor == end:
            self._logger.debug(f"Dropped zero-size {self._tool.name} gesture")
            return

        tool = self._tool
        color = QColor(self._color)
        width = self._stroke_width

        self._history.push(tool.name.capitalize())
        self._layer.commit(lambda painter: paint_shape(painter, tool, anchor, end, color, width))
        self._logger.debug(
            f"Committed {tool.name} from ({anchor.x()}, {anchor.y()}) to ({end.x()}, {end.y()})"
        )

    def _reset_gesture(self) -> None:
        was_shape = self._state == DrawState.SHAPE_DRAWING
        self._state = DrawState.IDLE
        self._anchor = None
        self._last_point = None
        self._current_point = None
        if was_shape:
            self.preview_changed.emit()
