"""
Tests for the text overlay lifecycle.

Commits are checked through the undo history, the baseline math and the
ink left in the annotation layer.
"""

import pytest
from PySide6.QtCore import QPoint, QRect
from PySide6.QtGui import QFontMetrics

from screenme.editor.drawing import DrawingStateMachine, ToolType
from screenme.editor.text_overlay import TextOverlayController, text_baselines


@pytest.fixture
def overlay(host_widget, layer, history):
    return TextOverlayController(host_widget, layer, history)


@pytest.fixture
def text_drawing(layer, history, overlay):
    machine = DrawingStateMachine(layer, history, overlay)
    machine.set_tool(ToolType.TEXT)
    return machine


def test_baselines_start_one_ascent_below_anchor(overlay):
    metrics = QFontMetrics(overlay.font)
    baselines = text_baselines(QPoint(50, 50), ["Hi", "there"], metrics)

    assert baselines[0] == (QPoint(50, 50 + metrics.ascent()), "Hi")
    assert baselines[1] == (QPoint(50, 50 + metrics.ascent() + metrics.height()), "there")


def ink_bounds(image):
    """Bounding rect of all non-transparent pixels, or None."""
    xs, ys = [], []
    for y in range(image.height()):
        for x in range(image.width()):
            if image.pixelColor(x, y).alpha() > 0:
                xs.append(x)
                ys.append(y)
    if not xs:
        return None
    return QRect(QPoint(min(xs), min(ys)), QPoint(max(xs), max(ys)))


def test_click_type_click_commits_text(text_drawing, overlay, layer, history):
    opened = []
    overlay.session_opened.connect(opened.append)

    text_drawing.press(QPoint(50, 50))
    assert overlay.is_open
    assert opened == [QPoint(50, 50)]
    assert overlay.editor.pos() == QPoint(50, 50)

    overlay.editor.setPlainText("Hi")
    text_drawing.press(QPoint(120, 80))

    assert not overlay.is_open
    assert overlay.editor is None
    assert history.depth == 1

    # Glyphs sit right of the anchor and end by the first line's descent
    metrics = QFontMetrics(overlay.font)
    bounds = ink_bounds(layer.image)
    assert bounds is not None
    assert bounds.left() >= 50
    assert bounds.top() >= 50
    assert bounds.bottom() <= 50 + metrics.ascent() + metrics.descent()


def test_second_click_does_not_open_a_new_field(text_drawing, overlay):
    text_drawing.press(QPoint(50, 50))
    overlay.editor.setPlainText("Hi")
    text_drawing.press(QPoint(120, 80))

    assert not overlay.is_open


def test_empty_text_commits_nothing(text_drawing, overlay, layer, history):
    text_drawing.press(QPoint(50, 50))
    text_drawing.press(QPoint(50, 50))

    assert not overlay.is_open
    assert history.depth == 0
    assert layer.is_blank()


def test_escape_finalizes_open_text(text_drawing, overlay, history):
    text_drawing.press(QPoint(10, 10))
    overlay.editor.setPlainText("note")

    assert text_drawing.escape()
    assert not overlay.is_open
    assert history.depth == 1
    assert not text_drawing.escape()


def test_finalize_is_idempotent(overlay, history):
    overlay.open(QPoint(10, 10))
    overlay.editor.setPlainText("once")

    assert overlay.finalize()
    assert not overlay.finalize()
    assert history.depth == 1


def test_only_one_session_at_a_time(overlay):
    assert overlay.open(QPoint(10, 10))
    assert not overlay.open(QPoint(40, 40))


def test_leaving_text_tool_finalizes(text_drawing, overlay, history):
    text_drawing.press(QPoint(10, 10))
    overlay.editor.setPlainText("bye")

    text_drawing.set_tool(ToolType.PEN)

    assert not overlay.is_open
    assert history.depth == 1


def test_field_grows_with_content(overlay):
    overlay.open(QPoint(10, 10))
    editor = overlay.editor
    empty_width = editor.width()

    editor.setPlainText("a much longer line of text")
    assert editor.width() > empty_width

    one_line_height = editor.height()
    editor.setPlainText("line one\nline two")
    assert editor.height() > one_line_height


def test_scroll_changes_font_size_while_editing(text_drawing, overlay):
    size = overlay.font.pointSize()

    # No open field: nothing to resize
    assert not text_drawing.scroll(120)

    text_drawing.press(QPoint(10, 10))
    assert text_drawing.scroll(240)
    assert overlay.font.pointSize() == size + 2
    assert overlay.editor.font().pointSize() == size + 2


def test_font_size_stays_positive(overlay):
    overlay.open(QPoint(0, 0))
    assert not overlay.change_font_size(-1000)
    assert overlay.font.pointSize() > 0
