"""
Tests for drawing tools: gestures, snapshots, arrowheads and scrolling.
"""

import math

import pytest
from PySide6.QtCore import QPoint, QPointF, QRect, Qt
from PySide6.QtGui import QColor, QImage, QPainter

from screenme.editor.drawing import (
    MAX_STROKE_WIDTH,
    MIN_STROKE_WIDTH,
    DrawingStateMachine,
    DrawState,
    ToolType,
    arrow_head_points,
    paint_shape,
    wheel_steps,
)


@pytest.fixture
def drawing(layer, history):
    return DrawingStateMachine(layer, history)


def test_no_tool_does_not_consume_press(drawing, history):
    assert not drawing.press(QPoint(10, 10))
    assert drawing.state == DrawState.IDLE
    assert history.depth == 0


def test_pen_gesture_pushes_one_snapshot(drawing, layer, history):
    drawing.set_tool(ToolType.PEN)

    drawing.press(QPoint(10, 10))
    for x in range(20, 120, 10):
        drawing.move(QPoint(x, 50))
    drawing.release(QPoint(110, 50))

    assert history.depth == 1
    assert not layer.is_blank()
    assert drawing.state == DrawState.IDLE

    history.undo()
    assert layer.is_blank()


def test_shape_is_previewed_then_committed(drawing, layer, history):
    drawing.set_tool(ToolType.RECTANGLE)

    drawing.press(QPoint(10, 10))
    drawing.move(QPoint(60, 40))

    preview = drawing.preview
    assert preview is not None
    assert preview.bounding_rect == QRect(10, 10, 50, 30)
    # Nothing is written before release
    assert layer.is_blank()
    assert history.depth == 0

    drawing.release(QPoint(60, 40))

    assert drawing.preview is None
    assert history.depth == 1
    assert not layer.is_blank()


@pytest.mark.parametrize("tool", [ToolType.ELLIPSE, ToolType.LINE, ToolType.ARROW])
def test_each_shape_tool_commits(drawing, layer, history, tool):
    drawing.set_tool(tool)
    drawing.press(QPoint(20, 20))
    drawing.move(QPoint(120, 80))
    drawing.release(QPoint(120, 80))

    assert history.depth == 1
    assert not layer.is_blank()


def test_zero_size_shape_is_dropped(drawing, layer, history):
    drawing.set_tool(ToolType.RECTANGLE)
    drawing.press(QPoint(30, 30))
    drawing.release(QPoint(30, 30))

    assert history.depth == 0
    assert layer.is_blank()


def test_switching_tool_cancels_shape_in_progress(drawing, layer):
    drawing.set_tool(ToolType.LINE)
    drawing.press(QPoint(0, 0))
    drawing.move(QPoint(50, 50))

    drawing.set_tool(ToolType.PEN)

    assert drawing.preview is None
    assert drawing.state == DrawState.IDLE
    assert layer.is_blank()


def test_arrow_head_geometry():
    wing1, wing2 = arrow_head_points(QPointF(0, 0), QPointF(100, 0), 5)

    # Wings are 2 x width from the tip at +/-30 degrees from the shaft
    expected_x = 100 - 10 * math.cos(math.pi / 6)
    assert wing1.x() == pytest.approx(expected_x)
    assert wing2.x() == pytest.approx(expected_x)
    assert sorted([wing1.y(), wing2.y()]) == pytest.approx([-5.0, 5.0])
    for wing in (wing1, wing2):
        assert math.hypot(wing.x() - 100, wing.y()) == pytest.approx(10)


def test_arrow_head_fills_with_stroke_color(qapp):
    image = QImage(100, 40, QImage.Format.Format_ARGB32_Premultiplied)
    image.fill(Qt.GlobalColor.transparent)
    painter = QPainter(image)
    paint_shape(painter, ToolType.ARROW, QPoint(0, 20), QPoint(90, 20),
                QColor(Qt.GlobalColor.red), 8)
    painter.end()

    # Inside the head triangle, below the shaft
    assert image.pixelColor(78, 25) == QColor(Qt.GlobalColor.red)


def test_paint_shape_rejects_non_shape_tool(qapp):
    image = QImage(10, 10, QImage.Format.Format_ARGB32_Premultiplied)
    painter = QPainter(image)
    try:
        with pytest.raises(ValueError):
            paint_shape(painter, ToolType.PEN, QPoint(0, 0), QPoint(5, 5),
                        QColor(Qt.GlobalColor.black), 1)
    finally:
        painter.end()


def test_wheel_steps_are_whole_notches():
    assert wheel_steps(120) == 1
    assert wheel_steps(-240) == -2
    assert wheel_steps(60) == 0
    assert wheel_steps(-60) == 0


def test_scroll_changes_stroke_width_and_clamps(drawing):
    drawing.set_tool(ToolType.PEN)
    start = drawing.stroke_width

    assert drawing.scroll(120)
    assert drawing.stroke_width == start + 1

    drawing.scroll(120 * 50)
    assert drawing.stroke_width == MAX_STROKE_WIDTH
    assert not drawing.scroll(120)

    drawing.scroll(-120 * 50)
    assert drawing.stroke_width == MIN_STROKE_WIDTH


def test_scroll_below_one_notch_does_nothing(drawing):
    drawing.set_tool(ToolType.PEN)
    start = drawing.stroke_width

    assert not drawing.scroll(60)
    assert drawing.stroke_width == start


def test_scroll_without_tool_is_ignored(drawing):
    start = drawing.stroke_width
    assert not drawing.scroll(240)
    assert drawing.stroke_width == start
