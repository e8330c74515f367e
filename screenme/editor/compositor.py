"""
Per-frame rendering of the screenshot display.

Layers, bottom to top:
1. Captured screenshot
2. Annotation layer (alpha-blended)
3. Selection outline, handles and size label (if a selection exists)
4. Live preview of the shape being dragged
5. Brush-size circle around the pointer (if a drawing tool is active)

Nothing here mutates editor state.
"""

from typing import Optional

from PySide6.QtCore import QPoint, QRect, Qt
from PySide6.QtGui import QColor, QPainter, QPen

from screenme.editor.drawing import DrawingStateMachine, ToolType, paint_shape
from screenme.editor.layers import AnnotationLayer, CapturedImage
from screenme.editor.selection import SelectionEngine, handle_points

SELECTION_COLOR = QColor(Qt.GlobalColor.red)
SELECTION_BORDER_WIDTH = 2
HANDLE_MARK_SIZE = 6
BRUSH_INDICATOR_WIDTH = 2


def compose_frame(
    painter: QPainter,
    captured: CapturedImage,
    layer: AnnotationLayer,
    selection: SelectionEngine,
    drawing: DrawingStateMachine,
    cursor_pos: Optional[QPoint] = None,
) -> None:
    """Draw one complete frame of the display onto painter."""
    painter.drawImage(QPoint(0, 0), captured.image)
    painter.drawImage(QPoint(0, 0), layer.image)

    if selection.is_valid:
        draw_selection(painter, selection)

    preview = drawing.preview
    if preview is not None:
        painter.save()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        paint_shape(
            painter, preview.tool, preview.anchor, preview.end,
            preview.color, preview.stroke_width,
        )
        painter.restore()

    if drawing.tool != ToolType.NONE and cursor_pos is not None:
        draw_brush_indicator(painter, cursor_pos, drawing.stroke_width, drawing.color)


def draw_selection(painter: QPainter, selection: SelectionEngine) -> None:
    """Dashed outline, the 8 handle marks and the "WxH" label."""
    rect = selection.rect

    painter.save()
    painter.setPen(QPen(SELECTION_COLOR, SELECTION_BORDER_WIDTH, Qt.PenStyle.DashLine))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawRect(rect)

    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(SELECTION_COLOR)
    half = HANDLE_MARK_SIZE // 2
    for point in handle_points(rect).values():
        painter.drawRect(QRect(point.x() - half, point.y() - half, HANDLE_MARK_SIZE, HANDLE_MARK_SIZE))

    _draw_size_label(painter, selection.size_label, selection.label_position)
    painter.restore()


def _draw_size_label(painter: QPainter, text: str, position: QPoint) -> None:
    if not text:
        return

    # Shadow first so the label reads on light and dark backgrounds
    painter.setPen(QColor(0, 0, 0, 200))
    painter.drawText(position + QPoint(1, 1), text)
    painter.setPen(QColor(255, 255, 255))
    painter.drawText(position, text)


def draw_brush_indicator(painter: QPainter, center: QPoint, radius: int, color: QColor) -> None:
    painter.save()
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    painter.setPen(QPen(color, BRUSH_INDICATOR_WIDTH, Qt.PenStyle.SolidLine))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawEllipse(center, radius, radius)
    painter.restore()
